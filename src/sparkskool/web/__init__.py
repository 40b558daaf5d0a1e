"""Web API for SparkSkool.

FastAPI application exposing grading, question extraction, slides,
materials, notes, chat, lesson plans and classroom games.
"""
