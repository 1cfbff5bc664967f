"""Issue an access token for a bakery member, e.g. for local testing.

Usage:
    python create_token.py admin@bakery.com --days 365
"""
import argparse

from bakery_reservation_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue a bearer token for a member e-mail.")
    ap.add_argument("email", help="E-mail of an existing member")
    ap.add_argument("--days", type=int, default=1, help="Token lifetime in days")
    args = ap.parse_args()
    print(create_access_token({"sub": args.email}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
