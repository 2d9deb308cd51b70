"""Conversation feature package: models, store, manager, controller and router.

Conversations are stored as one record per thread holding the ordered message
history; each new turn rewrites the record after the language model answered.
"""
