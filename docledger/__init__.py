"""
Document lifecycle ledger.

Registration, partial update, revocation and historical retrieval of
Document records kept in an append-only, key-addressed ledger store.

Components:
- document: Document record and its external field table
- store: LedgerStore contract plus in-memory and JSON Lines stores
- adapter: Record store adapter (bytes in, bytes out)
- service: Document lifecycle service (register/get/update/revoke)
- contract: Operation-name dispatch table and invocation responses
"""

__version__ = "0.1.0"
