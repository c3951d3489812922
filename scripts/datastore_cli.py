#!/usr/bin/env python
"""
Command line access to the user datastore and submitter.

Client settings are read from the environment (see ``jwt_clients.config``).
Examples::

    python scripts/datastore_cli.py get USER_ID USER_TOKEN
    python scripts/datastore_cli.py set USER_ID USER_TOKEN '{"name": "value"}'
    python scripts/datastore_cli.py submit USER_ID USER_TOKEN '[{"type": "email"}]'
    python scripts/datastore_cli.py status SUBMISSION_ID

Results are printed as JSON.  Client errors are printed to stderr as
``Name code: message`` and the exit status is 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List, Optional

from jwt_clients.config import (
    SubmitterConfig,
    UserDataStoreConfig,
    create_submitter_client,
    create_user_datastore_client,
)
from jwt_clients.errors import ClientError
from jwt_clients.transport import Transport


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User datastore and submitter client")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Fetch and decrypt a user's data")
    get.add_argument("user_id")
    get.add_argument("user_token")

    put = sub.add_parser("set", help="Encrypt and store a user's data")
    put.add_argument("user_id")
    put.add_argument("user_token")
    put.add_argument("payload", type=json.loads, help="JSON value to store")

    submit = sub.add_parser("submit", help="Send submission instructions")
    submit.add_argument("user_id")
    submit.add_argument("user_token")
    submit.add_argument("submissions", type=json.loads, help="JSON list of instructions")

    status = sub.add_parser("status", help="Fetch submission status")
    status.add_argument("submission_id")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, transport: Optional[Transport] = None) -> Any:
    if args.command == "get":
        client = create_user_datastore_client(UserDataStoreConfig.from_env(), transport)
        return await client.get_data(args.user_id, args.user_token)
    if args.command == "set":
        client = create_user_datastore_client(UserDataStoreConfig.from_env(), transport)
        return await client.set_data(args.user_id, args.user_token, args.payload)
    submitter = create_submitter_client(SubmitterConfig.from_env(), transport)
    if args.command == "submit":
        return await submitter.submit(args.user_id, args.user_token, args.submissions)
    return await submitter.get_status(args.submission_id)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    args = parse_args(argv)
    try:
        result = asyncio.run(run(args))
    except ClientError as exc:
        print(f"{exc.name} {exc.code}: {exc.message}", file=sys.stderr)
        return 1
    if result is not None:
        print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
