"""Submit one card transaction to the API and print the JSON result."""

import argparse
import json
from uuid import uuid4

import httpx


def main() -> None:
    """CLI entrypoint for manual end-to-end checks against a sandbox gateway."""

    parser = argparse.ArgumentParser(description="Create one card transaction through the CardPay API.")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--amount-in-cents", type=int, default=10000)
    parser.add_argument("--card-number", default="4242424242424242")
    parser.add_argument("--cvc", default="123")
    parser.add_argument("--exp-month", default="12")
    parser.add_argument("--exp-year", default="29")
    parser.add_argument("--card-holder", default="Juan Perez")
    parser.add_argument("--document-number", default="12345678")
    parser.add_argument("--document-type", default="CC")
    parser.add_argument("--email", default="test@example.com")
    parser.add_argument("--installments", type=int, default=1)
    # Polling can take up to max_attempts * interval on the server side.
    parser.add_argument("--timeout", type=float, default=60.0)
    args = parser.parse_args()

    payload = {
        "card_number": args.card_number,
        "cvc": args.cvc,
        "exp_month": args.exp_month,
        "exp_year": args.exp_year,
        "card_holder_name": args.card_holder,
        "document_number": args.document_number,
        "document_type": args.document_type,
        "amount_in_cents": args.amount_in_cents,
        "customer_email": args.email,
        "installments": args.installments,
    }
    resp = httpx.post(
        f"{args.base_url}/transactions",
        json=payload,
        headers={"x-trace-id": str(uuid4())},
        timeout=args.timeout,
    )
    print(json.dumps(resp.json(), indent=2))
    if resp.status_code >= 400:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
