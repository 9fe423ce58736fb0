"""
Issue Reviewer Token

Mints a signed access token for a HEAD or TEACHER reviewer, for local
development and smoke testing. Production tokens come from the auth
subsystem.

Usage:
    python scripts/issue_token.py --role HEAD --subject head-1 --name "Admissions Head"
    python scripts/issue_token.py --role TEACHER --course DBMS --subject teacher-7
"""

import argparse
from datetime import timedelta

from tti_admissions.core.auth import Role
from tti_admissions.core.security import create_access_token
from tti_admissions.modules.admissions.models import Course


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue a reviewer access token.")
    parser.add_argument("--role", required=True, choices=[r.value for r in Role])
    parser.add_argument("--subject", required=True, help="User id placed in the sub claim")
    parser.add_argument("--course", choices=[c.value for c in Course])
    parser.add_argument("--name", default="")
    parser.add_argument("--email")
    parser.add_argument("--minutes", type=int, help="Token lifetime in minutes")
    return parser


def main() -> None:
    args = build_parser().parse_args()

    if args.role == Role.TEACHER.value and not args.course:
        raise SystemExit("TEACHER tokens need --course")

    claims = {"role": args.role, "name": args.name}
    if args.role == Role.TEACHER.value:
        claims["course"] = args.course
    if args.email:
        claims["email"] = args.email

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    token = create_access_token(args.subject, additional_claims=claims, expires_delta=expires)

    print(f"Token for {args.role} {args.subject}:")
    print(token)


if __name__ == "__main__":
    main()
