from decimal import Decimal
from typing import List, Literal, Optional

from api.models import Cart, Order


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values (stringified).
        aligns: 'l', 'c' or 'r' per column, defaults to all 'c'.

    Returns:
        str: Markdown formatted table, or "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    rows = [[str(cell) for cell in row] for row in rows]

    if aligns is None:
        aligns = ["c"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)


def format_price(amount: Decimal) -> str:
    return f"${amount.quantize(Decimal('0.01'))}"


def cart_summary_markdown(cart: Cart) -> str:
    """Order summary shown before checkout. Amounts come from the server as is."""
    rows = [
        [
            item.product.name or f"Product {item.product.id}",
            format_price(item.product.price),
            item.quantity,
            format_price(item.subtotal),
        ]
        for item in cart.items
    ]
    table = generate_markdown_table(
        ["Product", "Unit Price", "Quantity", "Subtotal"], rows, ["l", "r", "r", "r"]
    )
    return f"### Order Summary\n\n{table}\n\n**Total:** {format_price(cart.total)}"


def order_detail_markdown(order: Optional[Order]) -> str:
    if order is None:
        return "### Select an order to view its details."
    date = order.order_date.strftime("%Y-%m-%d %H:%M") if order.order_date else "-"
    header = (
        f"### Order {order.order_number or order.id}\n"
        f"Date: {date}  \n"
        f"Status: **{order.status}**\n\n"
    )
    rows = [
        [li.product_id, li.quantity, format_price(li.price), format_price(li.price * li.quantity)]
        for li in order.line_items
    ]
    table = generate_markdown_table(
        ["Product ID", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
    )
    return header + table + f"\n\n**Grand Total:** {format_price(order.total_price)}"
