"""
Dream Diary
===========

Tag indexing and search core for a personal dream diary.

Users record dreams, tag them with recurring people and places filed
under a Japanese syllabary index, search them by keywords and tags, and
draw random "overflow" fragments from their own dream texts.

Modules:
    - core: Configuration, logging, exceptions, validators, results
    - database: Models, entity managers, tag reconciliation, DreamDiaryDB
    - search: Keyword and tag-intersection search
    - analysis: Recurring tags and overflow fragments
    - utils: Syllabary classification and text helpers
    - cli: The ``dreamdiary`` command
"""

__version__ = "1.0.0"
