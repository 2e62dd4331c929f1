SQL_LIST_CHANNELS = """
    SELECT id, name, category, country, language, description, source, metadata
    FROM channels
    ORDER BY seq
"""

SQL_GET_CHANNEL = """
    SELECT id, name, category, country, language, description, source, metadata
    FROM channels
    WHERE id = ?
"""

SQL_COUNT_CHANNELS = "SELECT COUNT(1) FROM channels"

SQL_UPSERT_CHANNELS = """
    INSERT INTO channels (id, name, category, country, language, description, source, metadata)
    VALUES (:id, :name, :category, :country, :language, :description, :source, :metadata)
    ON CONFLICT(id) DO UPDATE SET
        name = excluded.name,
        category = excluded.category,
        country = excluded.country,
        language = excluded.language,
        description = excluded.description,
        source = excluded.source,
        metadata = excluded.metadata,
        updated_at = CURRENT_TIMESTAMP
"""

SQL_DELETE_CHANNEL = "DELETE FROM channels WHERE id = ?"
