from datetime import date
from unittest import mock

from markup_dashboard.services.store import PRICING_BLOCKS_KEY, REVENUE_HISTORY_KEY

from tests.base import AppTestCase, BUSINESS

HEADERS = {"X-API-KEY": "test-key"}


class TestMarkupRoutes(AppTestCase):

    def setUp(self):
        super().setUp()
        self.add(self.fixed_expense("fx1", 1000), self.charge("tx1", "ICMS", percent=8))
        month = date.today().replace(day=1)
        self.save_config(REVENUE_HISTORY_KEY, self.revenue((month, 10000)))
        self.save_config(PRICING_BLOCKS_KEY, [
            {"id": "b1", "name": "Venda Balcão", "desired_profit_percent": 12, "period": "12"},
        ])
        self.select("b1", "fx1", "tx1")

    def test_recalculate_requires_api_key(self):
        resp = self.client.post(f"/markups/{BUSINESS}/recalculate")
        self.assertEqual(resp.status_code, 401)
        resp = self.client.post(f"/markups/{BUSINESS}/recalculate", headers={"X-API-KEY": "wrong"})
        self.assertEqual(resp.status_code, 401)

    def test_recalculate_and_list(self):
        resp = self.client.post(f"/markups/{BUSINESS}/recalculate", headers=HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["processed"], ["Venda Balcão"])

        data = self.client.get(f"/markups/{BUSINESS}").get_json()
        self.assertEqual(len(data["results"]), 1)
        row = data["results"][0]
        self.assertEqual(row["name"], "Venda Balcão")
        self.assertAlmostEqual(row["markup_multiplier"], 1 / 0.7, places=6)
        self.assertNotIn("id", row)

    def test_recalculate_reports_shared_load_failure(self):
        self.save_config(REVENUE_HISTORY_KEY, [{"amount": 1}])
        resp = self.client.post(f"/markups/{BUSINESS}/recalculate", headers=HEADERS)
        self.assertEqual(resp.status_code, 503)
        self.assertIn("error", resp.get_json())

    def test_breakdown(self):
        self.client.post(f"/markups/{BUSINESS}/recalculate", headers=HEADERS)
        resp = self.client.get(f"/markups/{BUSINESS}/breakdown/venda_balcão")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["taxes_percent"], 8)
        self.assertEqual(self.client.get(f"/markups/{BUSINESS}/breakdown/nope").status_code, 404)

    def test_preview(self):
        resp = self.client.get(f"/markups/{BUSINESS}/blocks/b1/preview")
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertEqual(data["average_revenue"], 10000)
        self.assertEqual(data["averaging_period"], "12")
        self.assertEqual(data["period"], "12")
        self.assertAlmostEqual(data["total_percent"], 0.30, places=6)
        self.assertEqual(self.client.get(f"/markups/{BUSINESS}").get_json()["results"], [])
        self.assertEqual(self.client.get(f"/markups/{BUSINESS}/blocks/zz/preview").status_code, 404)

    def test_price(self):
        self.client.post(f"/markups/{BUSINESS}/recalculate", headers=HEADERS)
        resp = self.client.get(f"/markups/{BUSINESS}/price", query_string={"name": "Venda Balcão", "cost": "7"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["price"], 10.0)

    def test_price_validation(self):
        url = f"/markups/{BUSINESS}/price"
        self.assertEqual(self.client.get(url, query_string={"name": "Venda Balcão", "cost": "x"}).status_code, 400)
        self.assertEqual(self.client.get(url, query_string={"name": "Venda Balcão", "cost": "-1"}).status_code, 400)
        for bad in ("nan", "inf", "-inf"):
            resp = self.client.get(url, query_string={"name": "Venda Balcão", "cost": bad})
            self.assertEqual(resp.status_code, 400, bad)
            self.assertIn("error", resp.get_json())
        self.assertEqual(self.client.get(url, query_string={"name": "Nope", "cost": "1"}).status_code, 404)

    def test_session_start_schedules(self):
        with mock.patch("markup_dashboard.routes.markups.schedule_recalculation") as schedule:
            resp = self.client.post(f"/markups/{BUSINESS}/session-start", headers=HEADERS)
        self.assertEqual(resp.status_code, 202)
        schedule.assert_called_once()
        self.assertEqual(schedule.call_args.args[1], BUSINESS)
