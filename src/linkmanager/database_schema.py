# src/linkmanager/database_schema.py

DEFAULT_SCHEMA_SCRIPT = """
CREATE TABLE IF NOT EXISTS links (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id INTEGER NOT NULL,
    url TEXT NOT NULL,
    domain TEXT NOT NULL,
    anchor_text TEXT NOT NULL,
    is_external INTEGER NOT NULL,
    link_count INTEGER NOT NULL DEFAULT 1,
    last_updated TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_links_document ON links(document_id);
CREATE INDEX IF NOT EXISTS idx_links_domain ON links(domain);
CREATE INDEX IF NOT EXISTS idx_links_external ON links(is_external);
CREATE INDEX IF NOT EXISTS idx_links_url ON links(url);
"""

LINK_INSERT_SQL = """
INSERT INTO links (document_id, url, domain, anchor_text, is_external, link_count)
VALUES (?, ?, ?, ?, ?, ?)
"""
