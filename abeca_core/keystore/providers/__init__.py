# abeca_core/keystore/providers/__init__.py
