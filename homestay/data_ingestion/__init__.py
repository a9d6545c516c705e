"""
Seed data ingestion package.

Responsibilities:
- Read the listings, users and interactions CSV files with pandas.
- Normalize them into the canonical record columns.
- Build the in-memory record store the recommenders read from.
"""
