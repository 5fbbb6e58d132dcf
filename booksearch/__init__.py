"""
book-search core package.

Modules
───────
models   — Pydantic data models (SearchResult, StoredRecord, SearchOutcome)
store    — JSON flat-file record store (read, insert, find, save_unique, delete_one)
client   — Open Library search client (search_by_keyword, get_detailed_data)
prompts  — rich-based choice list and yes/no confirmation
flow     — interactive search, history and bookmark flows
"""
