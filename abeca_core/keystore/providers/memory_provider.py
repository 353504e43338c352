from typing import Dict, Optional
from abeca_core.keys import Key
from abeca_core.keystore.provider import KeyStore


class InMemoryKeyStore(KeyStore):
    name = "memory"

    def __init__(self, engine=None):
        super().__init__(engine)
        self.private_keys: Dict[bytes, Key] = {}
        self.public_keys: Dict[bytes, Key] = {}

    def store_key(self, ski: bytes, key: Key) -> None:
        if key.private():
            self.private_keys[ski] = key
        else:
            self.public_keys[ski] = key

    def load_key(self, ski: bytes) -> Optional[Key]:
        return self.private_keys.get(ski) or self.public_keys.get(ski)

    def list_keys(self):
        return [
            {"ski": ski.hex(), "type": type(k).__name__, "private": k.private()}
            for table in (self.private_keys, self.public_keys)
            for ski, k in table.items()
        ]
