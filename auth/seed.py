"""
auth/seed.py -- Default account seeding on first startup.

Runs from the API lifespan. Idempotent: if any account exists the table is
left untouched, so restarting never duplicates or overwrites users.
"""

from __future__ import annotations

import logging

from auth.passwords import BcryptCredentialVerifier
from auth.store import CredentialStore
from core.config import Settings

logger = logging.getLogger("logingate.seed")


def seed_default_users(store: CredentialStore, verifier: BcryptCredentialVerifier, settings: Settings) -> bool:
    """Insert the configured admin account when the users table is empty.

    Returns True if a record was written.
    """
    if store.has_users():
        logger.info("The users table already contains data. Skipping seeding.")
        return False

    logger.info("Seeding default users into the database...")
    store.create_user(
        email=settings.seed_admin_email,
        password_hash=verifier.hash_secret(settings.seed_admin_password),
        role=settings.seed_admin_role,
    )
    logger.info("Default users have been seeded successfully.")
    return True
