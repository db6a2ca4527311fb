"""Pydantic schemas: governance domain records and API request bodies."""
