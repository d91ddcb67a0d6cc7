# canslim/universe.py — Ticker universe (explicit list or S&P 500 constituents)
import pandas as pd
import requests
from bs4 import BeautifulSoup
from canslim.config import SP500_CSV_URL, SP500_WIKI_URL, WIKI_HEADERS


def _yahoo_symbol(symbol: str) -> str:
    # Wikipedia writes class shares as BRK.B, Yahoo as BRK-B
    return symbol.strip().upper().replace(".", "-")


def _sp500_from_wikipedia() -> list:
    resp = requests.get(SP500_WIKI_URL, headers=WIKI_HEADERS, timeout=15)
    resp.raise_for_status()
    soup  = BeautifulSoup(resp.text, "html.parser")
    table = (soup.find("table", {"id": "constituents"})
             or soup.find("table", {"class": "wikitable"}))
    if table is None:
        raise ValueError("Constituents table not found")
    symbols = []
    for tr in table.find_all("tr")[1:]:
        cells = tr.find_all("td")
        if cells:
            symbols.append(_yahoo_symbol(cells[0].get_text(strip=True)))
    if not symbols:
        raise ValueError("Constituents table is empty")
    return symbols


def _sp500_from_csv() -> list:
    raw = pd.read_csv(SP500_CSV_URL)
    raw.columns = [c.lower() for c in raw.columns]
    return [_yahoo_symbol(s) for s in raw["symbol"].astype(str)]


def get_sp500_tickers() -> list:
    try:
        tickers = _sp500_from_wikipedia()
        print(f"✅  {len(tickers)} tickers (Wikipedia)")
        return tickers
    except Exception as e:
        print(f"  ⚠️  Wikipedia list failed: {e}")
    try:
        tickers = _sp500_from_csv()
        print(f"✅  {len(tickers)} tickers (GitHub CSV)")
        return tickers
    except Exception as e:
        raise RuntimeError(f"Both S&P 500 sources failed: {e}")


def get_universe(source) -> list:
    """
    "sp500"          → current S&P 500 constituents
    "AAPL,MSFT"      → those tickers
    ["AAPL", "MSFT"] → those tickers
    Duplicates are dropped, order kept.
    """
    if isinstance(source, str) and source.strip().lower() == "sp500":
        return get_sp500_tickers()
    items = source.split(",") if isinstance(source, str) else list(source)
    tickers = [_yahoo_symbol(s) for s in items if str(s).strip()]
    if not tickers:
        raise ValueError("Empty ticker universe")
    return list(dict.fromkeys(tickers))
