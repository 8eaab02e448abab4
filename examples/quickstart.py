"""
examples/quickstart.py – End-to-end demo of the YoBit SDK.

Walks through:
  1. Restoring session cookies and listing markets
  2. Fetching a ticker and the order book
  3. Reading balances with a signed private call
  4. Placing a limit order far from the market and cancelling it

HOW TO RUN
----------
    export YOBIT_API_KEY="your_api_key"
    export YOBIT_API_SECRET="your_secret"
    export YOBIT_DATA_DIR="data"          # nonce + cookies live here
    python examples/quickstart.py

    Set YOBIT_PLACE_ORDER=1 to actually submit (and cancel) an order.
"""

from __future__ import annotations

import logging
import os
from decimal import Decimal

from yobit_sdk import TradeType, YobitClient, YobitError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s – %(message)s",
)
logger = logging.getLogger("quickstart")

PAIR        = os.environ.get("YOBIT_PAIR", "ltc_btc")
PLACE_ORDER = os.environ.get("YOBIT_PLACE_ORDER") == "1"


def main() -> None:
    with YobitClient.from_env() as client:
        info = client.handshake()
        logger.info("%d markets, %s fee %.2f%%", len(info.pairs), PAIR, client.rest.fee(PAIR))

        ticker = client.rest.tickers([PAIR])[PAIR]
        logger.info("%s last=%s buy=%s sell=%s", PAIR, ticker.last, ticker.buy, ticker.sell)

        book = client.rest.depth(PAIR, limit=5)[PAIR]
        if book.bids:
            logger.info("best bid %s x %s", book.bids[0].price, book.bids[0].quantity)

        balances = client.rest.get_info().data.funds
        logger.info("non-zero funds: %s", {k: str(v) for k, v in balances.items() if v})

        if not PLACE_ORDER:
            return

        # Half the last price: rests on the book and will not fill
        rate  = ticker.last / 2
        pinfo = info.pairs[PAIR]
        resp  = client.rest.trade(PAIR, TradeType.BUY, rate=rate, amount=max(pinfo.min_amount, Decimal("0.01")))
        logger.info("placed order %d", resp.result.order_id)

        cancelled = client.rest.cancel_order(resp.result.order_id)
        logger.info("cancelled order %d", cancelled.result.order_id)


if __name__ == "__main__":
    try:
        main()
    except YobitError as exc:
        logger.error("%s", exc)
        raise SystemExit(1)
