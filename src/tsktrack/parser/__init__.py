"""Descriptor grammar: lexicon.py tokenizes one line, descriptor.py folds it into task fields."""
