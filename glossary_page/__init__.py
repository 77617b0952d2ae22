"""
Glossary page core package.

It reads a hand-authored glossary page (a definition list with conventional
ids, classes and data attributes) into immutable dataclasses, and bridges the
application core that renders it to the hosting page through one-way,
fire-and-forget ports: scroll and focus commands, theme persistence,
clipboard writes, timestamps and generated ids.
"""
