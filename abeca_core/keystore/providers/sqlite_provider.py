from __future__ import annotations
from typing import Optional, List, Dict, Any
import os, sqlite3, threading
from abeca_core.keys import Key
from abeca_core.keystore.provider import KeyStore, decode_key_record, encode_key_record
from abeca_core.utils import hexe, now_ts


class SQLiteKeyStore(KeyStore):
    """
    KeyStore persisting key material in a single SQLite table.

    Rows are addressed by (hex SKI, private flag) so a public key and its
    private counterpart can live side by side, the same way a file keystore
    keeps `<ski>_sk` and `<ski>_pk`.
    """
    name = "sqlite"

    def __init__(self, path="db/keystore.db", engine=None):
        super().__init__(engine)
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._lock = threading.Lock()
        self._init()

    def _init(self) -> None:
        self.db.execute("""CREATE TABLE IF NOT EXISTS keystore(
            ski TEXT NOT NULL,
            private INTEGER NOT NULL,
            kind TEXT NOT NULL,
            material BLOB NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (ski, private)
        )""")
        self.db.commit()

    def store_key(self, ski: bytes, key: Key) -> None:
        kind, blob = encode_key_record(key)
        with self._lock:
            self.db.execute(
                "INSERT INTO keystore(ski,private,kind,material,created_at) VALUES(?,?,?,?,?) "
                "ON CONFLICT(ski,private) DO UPDATE SET kind=excluded.kind, material=excluded.material",
                (hexe(ski), int(key.private()), kind, blob, now_ts()),
            )
            self.db.commit()

    def load_key(self, ski: bytes) -> Optional[Key]:
        with self._lock:
            cur = self.db.execute(
                "SELECT kind, private, material FROM keystore WHERE ski=? ORDER BY private DESC LIMIT 1",
                (hexe(ski),),
            )
            row = cur.fetchone()
        if not row:
            return None
        kind, private, blob = row
        return decode_key_record(kind, bool(private), bytes(blob))

    def list_keys(self) -> List[Dict[str, Any]]:
        with self._lock:
            cur = self.db.execute("SELECT ski, kind, private, created_at FROM keystore")
            rows = cur.fetchall()
        return [dict(zip(["ski", "kind", "private", "created_at"], r)) for r in rows]

    def close(self):
        self.db.close()
