# abeca_core/cpabe/__init__.py

from cryptography.x509 import ObjectIdentifier
from .attributes import attribute_id, attribute_ids, attribute_key_ski, canonical_attributes
from .engine import ABEEngine
from .keys import CPABEKey, CPABEMasterKey, CPABEParams, CPABEPrivateKey, cpabe_key_to_pem, lookup_ski
from .material import AttributeKey, MasterKey, Params

# X.509 extension carrying serialized CP-ABE params
PARAMS_OID_STRING = "1.2.3.4.5.6.7.8.9"
PARAMS_OID = ObjectIdentifier(PARAMS_OID_STRING)

__all__ = [
    "PARAMS_OID",
    "PARAMS_OID_STRING",
    "ABEEngine",
    "AttributeKey",
    "MasterKey",
    "Params",
    "CPABEKey",
    "CPABEMasterKey",
    "CPABEPrivateKey",
    "CPABEParams",
    "attribute_id",
    "attribute_ids",
    "attribute_key_ski",
    "canonical_attributes",
    "cpabe_key_to_pem",
    "lookup_ski",
]
