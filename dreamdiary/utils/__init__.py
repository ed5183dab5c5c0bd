"""
Stateless helpers: syllabary classification and text processing.
"""
