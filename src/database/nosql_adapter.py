"""
Document adapter for the file metadata store.
Stores each document as a JSON blob in SQLite, keyed by a string id column.
"""

import sqlite3
import json
import logging
from typing import Dict, Any, List, Optional
from datetime import datetime
from .schemas import DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)

# collection name -> (table, id column)
COLLECTIONS = {
    'file_records': ('file_records_docs', 'id'),
}


class NoSQLAdapter:
    """Adapter for document-based database operations"""

    def __init__(self, db_path: str = "uploads.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with JSON support"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _table(self, collection: str) -> tuple:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return COLLECTIONS[collection]

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection in DOCUMENT_VALIDATORS:
            try:
                DOCUMENT_VALIDATORS[collection](document)
            except Exception as e:
                logger.error(f"Document validation failed for {collection}: {e}")
                raise ValueError(f"Document validation failed: {e}")

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_document(self, json_str: str) -> Dict[str, Any]:
        """Deserialize JSON string to document"""
        return json.loads(json_str)

    def init_collections(self) -> None:
        """Initialize document collections (tables)"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS file_records_docs (
                    id TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_file_record_status
                ON file_records_docs(json_extract(document, '$.status'))
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_file_record_uploaded_at
                ON file_records_docs(json_extract(document, '$.uploaded_at'))
            ''')
            conn.commit()
            logger.info("NoSQL collections initialized successfully")
        except Exception as e:
            logger.error(f"Error initializing collections: {e}")
            raise
        finally:
            conn.close()

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Insert a document. The document must already carry its id."""
        table, id_column = self._table(collection)
        self._validate_document(collection, document)
        conn = self._get_connection()
        try:
            doc_json = self._serialize_document(document)
            conn.execute(
                f'INSERT INTO {table} ({id_column}, document) VALUES (?, ?)',
                (document[id_column], doc_json),
            )
            conn.commit()
            logger.info(f"Created document in {collection} with ID: {document[id_column]}")
            return document[id_column]
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table, id_column = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(
                f'SELECT document FROM {table} WHERE {id_column} = ?', (doc_id,)
            ).fetchone()
            if row:
                return self._deserialize_document(row['document'])
            return None
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def patch_document(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> bool:
        """
        Overwrite top-level fields of a document and bump its version in one statement.

        With ``expected_version`` the write only applies if the stored version
        still matches. Returns False when no row was written.
        """
        table, id_column = self._table(collection)
        assignments = []
        params: List[Any] = []
        for key, value in fields.items():
            assignments.append("?, ?")
            params.extend([f"$.{key}", value])
        set_expr = (
            "json_set(document, " + ", ".join(assignments)
            + ", '$.version', json_extract(document, '$.version') + 1)"
        )
        query = f'UPDATE {table} SET document = {set_expr}, updated_at = CURRENT_TIMESTAMP WHERE {id_column} = ?'
        params.append(doc_id)
        if expected_version is not None:
            query += " AND json_extract(document, '$.version') = ?"
            params.append(expected_version)

        conn = self._get_connection()
        try:
            cursor = conn.execute(query, params)
            success = cursor.rowcount > 0
            conn.commit()
            if success:
                logger.info(f"Patched document in {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document patched in {collection} with ID: {doc_id}")
            return success
        except Exception as e:
            logger.error(f"Error patching document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete_document(self, collection: str, doc_id: str, expected_version: Optional[int] = None) -> bool:
        """Delete a document by ID"""
        table, id_column = self._table(collection)
        query = f'DELETE FROM {table} WHERE {id_column} = ?'
        params: List[Any] = [doc_id]
        if expected_version is not None:
            query += " AND json_extract(document, '$.version') = ?"
            params.append(expected_version)

        conn = self._get_connection()
        try:
            cursor = conn.execute(query, params)
            success = cursor.rowcount > 0
            conn.commit()
            if success:
                logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")
            return success
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def query_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Query documents with equality filters on top-level fields"""
        table, _ = self._table(collection)
        base_query = f"SELECT document FROM {table}"
        where_clauses = []
        params: List[Any] = []

        for key, value in (query or {}).items():
            where_clauses.append("json_extract(document, ?) = ?")
            params.extend([f"$.{key}", value])

        if where_clauses:
            base_query += " WHERE " + " AND ".join(where_clauses)
        if order_by:
            base_query += " ORDER BY json_extract(document, ?) " + ("DESC" if descending else "ASC")
            params.append(f"$.{order_by}")

        conn = self._get_connection()
        try:
            rows = conn.execute(base_query, params).fetchall()
            return [self._deserialize_document(row['document']) for row in rows]
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query"""
        table, _ = self._table(collection)
        base_query = f"SELECT COUNT(*) as count FROM {table}"
        where_clauses = []
        params: List[Any] = []
        for key, value in (query or {}).items():
            where_clauses.append("json_extract(document, ?) = ?")
            params.extend([f"$.{key}", value])
        if where_clauses:
            base_query += " WHERE " + " AND ".join(where_clauses)

        conn = self._get_connection()
        try:
            return conn.execute(base_query, params).fetchone()['count']
        except Exception as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise
        finally:
            conn.close()
