"""auth/ -- Credential storage, password verification and token issuance for LoginGate.

Layer rule: auth/ imports from core/ (models, config) and third-party
libraries only. It does NOT import from api/. api/ imports from auth/,
not the other way around.
"""
