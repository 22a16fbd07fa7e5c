"""Manual smoke run: multi-currency payments settle a EUR cost.

Scenario:
1. Create a EUR cost worth 100 (no surcharges)
2. Pay EUR 50 (partially paid)
3. Pay USD 54.30 (~ EUR 50 at the static table, now paid)
4. Show the item in BRL and the overall summary
"""

import json
import tempfile

from fastapi.testclient import TestClient

from immiplan.core.config import Settings
from immiplan.main import create_app


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(_env_file=None, data_dir=d, exchange_rate_provider="static")
        settings.init_post_load()
        app = create_app(settings_override=settings)
        client = TestClient(app)

        results = {}
        cost = client.post(
            "/costs/",
            json={
                "name": "Visto de residência",
                "category": "Documentação",
                "currency": "EUR",
                "quantity": 1,
                "unit_value": 100,
            },
            params={"display_currency": "EUR"},
        ).json()
        payments_url = f"/costs/{cost['id']}/payments/"
        results["after_eur"] = client.post(
            payments_url, json={"amount": 50, "date": "2024-03-01"}
        ).json()["status"]
        results["after_usd"] = client.post(
            payments_url,
            json={"amount": 54.30, "currency": "USD", "date": "2024-03-10"},
        ).json()["status"]
        results["in_brl"] = client.get(
            f"/costs/{cost['id']}", params={"display_currency": "BRL"}
        ).json()["formatted"]
        results["summary"] = client.get(
            "/costs/summary", params={"display_currency": "EUR"}
        ).json()
        print(json.dumps(results, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    run()
