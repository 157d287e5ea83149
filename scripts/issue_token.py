#!/usr/bin/env python3
"""
Issue a development access token and store it.

Tokens normally come from the identity service; this signs one with the
local secret so the API can be exercised by hand.

Usage:
    python scripts/issue_token.py --role admin
    python scripts/issue_token.py --role resident --principal-id 6f1c...
"""

import argparse
from pathlib import Path
from uuid import uuid4

from app.core.permissions import UserRole
from app.core.security import create_access_token

TOKEN_FILE = Path(__file__).parent.parent / ".token"


def issue(role: str, principal_id: str | None = None) -> str:
    """Sign a token for the given role and write it to the token file."""
    principal_id = principal_id or str(uuid4())
    token = create_access_token(principal_id, UserRole(role).value)
    TOKEN_FILE.write_text(token)

    print(f"Principal: {principal_id} ({role})")
    print(f"Token: {token}")
    return token


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.RESIDENT.value)
    parser.add_argument("--principal-id", default=None)
    args = parser.parse_args()

    issue(args.role, args.principal_id)
