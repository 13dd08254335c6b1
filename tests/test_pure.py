import unittest
from decimal import Decimal

from support import cart_body, cart_line, order_body

from api import payloads
from core.observable import Observable
from utils.pure import (
    cart_summary_markdown,
    format_price,
    generate_markdown_table,
    order_detail_markdown,
)


class MarkdownTableTestCase(unittest.TestCase):
    def test_table(self):
        md = generate_markdown_table(["A", "B"], [[1, 2]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | 2 |")

    def test_first_row_as_header(self):
        md = generate_markdown_table(None, [["k", "v"], ["x", "y"]])
        self.assertTrue(md.startswith("| k | v |\n| :---: | :---: |"))

    def test_no_rows(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")

    def test_align_mismatch(self):
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])


class FormattingTestCase(unittest.TestCase):
    def test_format_price(self):
        self.assertEqual(format_price(Decimal("3")), "$3.00")
        self.assertEqual(format_price(Decimal("19.999")), "$20.00")

    def test_cart_summary(self):
        cart = payloads.parse_cart(cart_body(cart_line(1, 2, "19.99", name="Lamp")))
        md = cart_summary_markdown(cart)
        self.assertIn("| Lamp | $19.99 | 2 | $39.98 |", md)
        self.assertIn("**Total:** $39.98", md)

    def test_order_detail(self):
        self.assertEqual(order_detail_markdown(None), "### Select an order to view its details.")
        md = order_detail_markdown(payloads.parse_order(order_body(42)))
        self.assertIn("### Order ORD-42", md)
        self.assertIn("Status: **CREATED**", md)
        self.assertIn("**Grand Total:** $20.00", md)


class ObservableTestCase(unittest.TestCase):
    def test_publish_and_unsubscribe(self):
        obs = Observable(0, name="counter")
        seen = []
        unsubscribe = obs.subscribe(seen.append)

        obs.publish(1)
        unsubscribe()
        obs.publish(2)

        self.assertEqual(seen, [1])
        self.assertEqual(obs.value, 2)

    def test_replay(self):
        obs = Observable("a")
        seen = []
        obs.subscribe(seen.append, replay=True)
        self.assertEqual(seen, ["a"])

    def test_failing_listener_does_not_stop_others(self):
        obs = Observable(0)
        seen = []

        def broken(_value):
            raise RuntimeError("boom")

        obs.subscribe(broken)
        obs.subscribe(seen.append)
        with self.assertLogs("core.observable", level="ERROR"):
            obs.publish(1)

        self.assertEqual(seen, [1])


if __name__ == "__main__":
    unittest.main()
