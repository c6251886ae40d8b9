"""
Accounting Verifier
Accounting equation, journal balance, inventory, depreciation, ratios, CVP and net income
"""

import re
from typing import List, Optional

from boardcheck.config import MONEY, RATE, STANDARD
from boardcheck.records import Check, Problem
from boardcheck.utils.quantities import NUM, find_number, labeled, parse_number
from boardcheck.utils.text_normalizer import normalize_text
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, reported_rate, reported_value

_AMOUNT = r"(\(\s*\d[\d,]*\.?\d*\s*\)|-?\d*\.?\d+)"
_MONEY_LINE = re.compile(r"\(\s*\d[\d,]*\.?\d*\s*\)|-?\d*\.?\d+")


def parse_amount(token: Optional[str]) -> Optional[float]:
    """Number from a ledger cell; `(1200)` and `(1,200)` are negative amounts."""
    if not token:
        return None
    value = parse_number(token.replace("(", "").replace(")", "").replace(",", ""))
    if value is None:
        return None
    return -abs(value) if "(" in token else value


def find_amount(text: str, *names: str) -> Optional[float]:
    """First `name: amount` / `name = amount` / `name amount` among `names`."""
    for name in names:
        m = re.search(rf"(?<![\w.]){name}\b\s*[:=]?\s*{_AMOUNT}", text, re.IGNORECASE)
        if m:
            value = parse_amount(m.group(1))
            if value is not None:
                return value
    return None


def reported_amount(final: Optional[str]) -> Optional[float]:
    answer = normalize_text(final).rsplit("=", 1)[-1]
    m = re.search(r"\(\s*(\d*\.?\d+)\s*\)", answer)
    if m:
        return -float(m.group(1))
    return reported_value(final)


# -------------------------
# Depreciation
# -------------------------
def straight_line(cost: float, salvage: float, life: float) -> float:
    return (cost - salvage) / life


def declining_balance(cost: float, salvage: float, life: float, year: int, factor: float = 2.0):
    """(expense in `year`, book value at its end); book value never drops below salvage."""
    rate = factor / life
    book = cost
    expense = 0.0
    for _ in range(max(1, year)):
        expense = min(book * rate, max(0.0, book - salvage))
        book -= expense
    return expense, book


def journal_totals(text: str):
    """(debits, credits) from lines tagged Dr/Debit or Cr/Credit; first amount on each line."""
    debits: List[float] = []
    credits: List[float] = []
    for line in text.splitlines():
        amounts = [parse_amount(t) for t in _MONEY_LINE.findall(line)]
        amounts = [a for a in amounts if a is not None]
        if not amounts:
            continue
        if re.search(r"\b(?:debit|dr)\b", line, re.IGNORECASE):
            debits.append(abs(amounts[0]))
        if re.search(r"\b(?:credit|cr)\b", line, re.IGNORECASE):
            credits.append(abs(amounts[-1]))
    return debits, credits


_TARGETS = (
    (r"net\s+income|\bni\b", "ni"),
    (r"book\s+value|\bbv\b", "bv"),
    (r"depreciation\s+expense|annual\s+depreciation|depreciation", "dep"),
    (r"ending\s+inventory|\bei\b", "ei"),
    (r"beginning\s+inventory|\bbi\b", "bi"),
    (r"\bcogs\b|cost\s+of\s+goods\s+sold", "cogs"),
    (r"\bpurchases\b", "purchases"),
    (r"current\s+ratio", "current ratio"),
    (r"quick\s+ratio|acid[-\s]*test", "quick ratio"),
    (r"debt[-\s]*to[-\s]*equity", "d/e"),
    (r"gross\s+(?:profit\s+)?margin", "gross margin"),
    (r"net\s+(?:profit\s+)?margin", "net margin"),
    (r"\broa\b|return\s+on\s+assets", "roa"),
    (r"\broe\b|return\s+on\s+equity", "roe"),
    (r"target\s+profit", "target units"),
    (r"break[-\s]*even\s+sales", "be sales"),
    (r"break[-\s]*even", "be units"),
    (r"\bliabilities\b", "l"),
    (r"\bequity\b", "e"),
    (r"\bassets\b", "a"),
)


class AccountingVerifier(Verifier):
    """
    Financial and managerial accounting arithmetic.

    Amounts may carry currency symbols, thousands separators or ledger
    parentheses for negatives. Identities stated in full on the board are
    checked as balances; otherwise the missing term is recomputed.
    """

    name = "accounting"
    subject = "accounting"
    method = "accounting-basic"
    trigger = re.compile(
        r"\b(accounting|assets?|liabilit(?:y|ies)|equity|stockholders|shareholders|journal|debit|credit|cogs|"
        r"inventory|fifo|lifo|depreciation|straight[-\s]*line|double[-\s]*declining|units[-\s]*of[-\s]*production|"
        r"current\s*ratio|quick\s*ratio|acid[-\s]*test|gross\s*margin|net\s*margin|roe|roa|debt[-\s]*to[-\s]*equity|"
        r"break[-\s]*even|contribution\s*margin|cvp|fixed\s*costs?|variable\s*cost|net\s*income|income\s*statement|"
        r"ebit)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(assets|liabilities|equity|journal|debit|credit|cogs|inventory|depreciation|salvage|book\s*value)\b",
        r"\b(current\s*ratio|quick\s*ratio|roe|roa|break[-\s]*even|contribution\s*margin|net\s*income|ebit)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        rep = reported_amount(final)

        self._check_journal(text, lower, collector)
        if rep is None:
            return
        collector.focus(asked_for(text, _TARGETS, fallback=False))

        self._check_equation(text, rep, collector)
        self._check_inventory(text, lower, rep, collector)
        self._check_depreciation(text, lower, rep, collector)
        self._check_ratios(text, lower, rep, reported_rate(final), collector)
        self._check_cvp(text, lower, rep, collector)
        self._check_income(text, lower, rep, collector)

    def _check_journal(self, text, lower, collector):
        if not re.search(r"\b(?:journal|entry|debit|credit|dr|cr)\b", lower):
            return
        debits, credits = journal_totals(text)
        if debits and credits:
            total_dr, total_cr = sum(debits), sum(credits)
            ok = abs(total_dr - total_cr) <= MONEY.abs_tol
            collector.add(Check(label="journal-balanced", ok=ok, lhs=total_dr, rhs=total_cr,
                                reason=None if ok else "debits ≠ credits"))

    def _check_equation(self, text, rep, collector):
        A = find_amount(text, r"total\s*assets", "assets")
        L = find_amount(text, r"total\s*liabilities", "liabilities")
        E = find_amount(text, r"(?:stockholders|shareholders|owners)'?\s*equity", r"total\s*equity", "equity")
        if A is not None and L is not None and E is not None:
            ok = abs(A - (L + E)) <= MONEY.abs_tol
            collector.add(Check(label="A=L+E", ok=ok, lhs=A, rhs=L + E,
                                reason=None if ok else "accounting equation not satisfied"))
        elif A is None and L is not None and E is not None:
            collector.compare("A", L + E, rep, MONEY, "assets mismatch", aliases=("assets", "total assets"))
        elif L is None and A is not None and E is not None:
            collector.compare("L", A - E, rep, MONEY, "liabilities mismatch", aliases=("liabilities",))
        elif E is None and A is not None and L is not None:
            collector.compare("E", A - L, rep, MONEY, "equity mismatch", aliases=("equity", "owners equity"))

    def _check_inventory(self, text, lower, rep, collector):
        if not re.search(r"inventory|\bcogs\b|cost\s*of\s*goods", lower):
            return
        BI = find_amount(text, r"beginning\s*inventory", "bi")
        P = find_amount(text, r"net\s*purchases", "purchases")
        COGS = find_amount(text, "cogs", r"cost\s*of\s*goods\s*sold")
        EI = find_amount(text, r"ending\s*inventory", "ei")
        terms = {"BI": BI, "purchases": P, "COGS": COGS, "EI": EI}
        missing = [k for k, v in terms.items() if v is None]
        if not missing:
            ok = abs(BI + P - COGS - EI) <= MONEY.abs_tol
            collector.add(Check(label="BI+Purch-COGS=EI", ok=ok, lhs=BI + P - COGS, rhs=EI,
                                reason=None if ok else "inventory identity mismatch"))
        elif missing == ["EI"]:
            collector.compare("EI", BI + P - COGS, rep, MONEY, "ending inventory mismatch",
                              aliases=("ending inventory",))
        elif missing == ["COGS"]:
            collector.compare("COGS", BI + P - EI, rep, MONEY, "COGS mismatch", aliases=("cost of goods sold",))
        elif missing == ["BI"]:
            collector.compare("BI", EI + COGS - P, rep, MONEY, "beginning inventory mismatch",
                              aliases=("beginning inventory",))
        elif missing == ["purchases"]:
            collector.compare("purchases", EI + COGS - BI, rep, MONEY, "purchases mismatch")

    def _check_depreciation(self, text, lower, rep, collector):
        if not re.search(r"depreciat|straight[-\s]*line|declining|\bddb\b|units[-\s]*of[-\s]*production", lower):
            return
        cost = find_amount(text, r"(?:asset\s*)?cost", r"purchase\s*price")
        salvage = find_amount(text, r"salvage(?:\s*value)?", r"residual(?:\s*value)?") or 0.0
        life = find_number(text, labeled(r"(?:useful\s*)?life"), rf"{NUM}\s*-?\s*years?\s*(?:useful\s*)?life",
                           rf"life\s*of\s*{NUM}\s*years?")
        year = find_number(text, labeled(r"year"), rf"(?:in|for|end\s*of)\s*year\s*{NUM}")
        if cost is None:
            return
        wants_book = bool(re.search(r"book\s*value|\bbv\b|carrying", lower))

        if re.search(r"units[-\s]*of[-\s]*production|\buop\b", lower):
            total = find_number(text, labeled(r"(?:total|estimated|lifetime)\s*(?:units|hours|miles)"),
                                labeled("capacity"))
            used = find_number(text, labeled(r"(?:units|hours|miles)\s*(?:produced|used|driven|this\s*year)"))
            if total and used is not None:
                collector.compare("dep", (cost - salvage) / total * used, rep, MONEY, "units-of-production mismatch",
                                  aliases=("depreciation", "depreciation expense"))
            return

        if not life:
            return
        if re.search(r"double[-\s]*declining|\bddb\b", lower):
            expense, book = declining_balance(cost, salvage, life, int(year or 1))
            if wants_book:
                collector.compare("BV", book, rep, MONEY, "DDB book value mismatch", aliases=("book value",))
            else:
                collector.compare("dep", expense, rep, MONEY, "DDB depreciation mismatch",
                                  aliases=("depreciation", "depreciation expense"))
        else:
            annual = straight_line(cost, salvage, life)
            if wants_book and year is not None:
                book = max(cost - min(year, life) * annual, salvage)
                collector.compare("BV", book, rep, MONEY, "straight-line book value mismatch",
                                  aliases=("book value",))
            else:
                collector.compare("dep", annual, rep, MONEY, "straight-line depreciation mismatch",
                                  aliases=("depreciation", "depreciation expense", "annual depreciation"))

    def _check_ratios(self, text, lower, rep, pct_rep, collector):
        CA = find_amount(text, r"current\s*assets", "ca")
        CL = find_amount(text, r"current\s*liabilities", "cl")
        if re.search(r"current\s*ratio", lower) and CA is not None and CL:
            collector.compare("current ratio", CA / CL, rep, RATE, "current ratio mismatch", aliases=("cr",))
        if re.search(r"quick\s*ratio|acid[-\s]*test", lower) and CL:
            cash = find_amount(text, r"cash(?:\s*and\s*(?:cash\s*)?equivalents)?")
            securities = find_amount(text, r"(?:marketable\s*)?securities")
            receivables = find_amount(text, r"accounts\s*receivable", "ar")
            inventory = find_amount(text, "inventory")
            if cash is not None or receivables is not None:
                quick = (cash or 0.0) + (securities or 0.0) + (receivables or 0.0)
            elif CA is not None and inventory is not None:
                quick = CA - inventory - (find_amount(text, r"prepaid(?:\s*expenses)?") or 0.0)
            else:
                quick = None
            if quick is not None:
                collector.compare("quick ratio", quick / CL, rep, RATE, "quick ratio mismatch", aliases=("qr",))
        if re.search(r"debt[-\s]*to[-\s]*equity", lower):
            debt = find_amount(text, r"total\s*(?:debt|liabilities)", "debt", "liabilities")
            equity = find_amount(text, r"(?:stockholders|shareholders)'?\s*equity", r"total\s*equity", "equity")
            if debt is not None and equity:
                collector.compare("d/e", debt / equity, rep, RATE, "debt-to-equity mismatch",
                                  aliases=("de", "debt to equity"))

        sales = find_amount(text, r"net\s*sales", "sales", "revenue")
        cogs = find_amount(text, "cogs", r"cost\s*of\s*goods\s*sold")
        net_income = find_amount(text, r"net\s*income", r"net\s*profit", "ni")
        if re.search(r"gross\s*(?:profit\s*)?margin", lower) and sales and cogs is not None:
            collector.compare("gross margin", (sales - cogs) / sales, pct_rep, RATE, "gross margin mismatch",
                              aliases=("gm",))
        if re.search(r"net\s*(?:profit\s*)?margin|profit\s*margin", lower) and sales and net_income is not None:
            collector.compare("net margin", net_income / sales, pct_rep, RATE, "net margin mismatch",
                              aliases=("npm", "profit margin"))
        if re.search(r"\broa\b|return\s*on\s*assets", lower) and net_income is not None:
            assets = find_amount(text, r"(?:average\s*)?total\s*assets", "assets")
            if assets:
                collector.compare("ROA", net_income / assets, pct_rep, RATE, "ROA mismatch")
        if re.search(r"\broe\b|return\s*on\s*equity", lower) and net_income is not None:
            equity = find_amount(text, r"(?:average\s*)?(?:stockholders|shareholders)'?\s*equity",
                                 r"total\s*equity", "equity")
            if equity:
                collector.compare("ROE", net_income / equity, pct_rep, RATE, "ROE mismatch")

    def _check_cvp(self, text, lower, rep, collector):
        if not re.search(r"break[-\s]*even|contribution\s*margin|\bcvp\b|target\s*profit", lower):
            return
        price = find_amount(text, r"(?:selling\s*)?price(?:\s*per\s*unit)?", "p")
        variable = find_amount(text, r"variable\s*cost(?:\s*per\s*unit)?", "vc", "vcu")
        fixed = find_amount(text, r"(?:total\s*)?fixed\s*(?:costs?|expenses?)", "fc")
        if None in (price, variable, fixed) or price - variable <= 0:
            return
        margin = price - variable
        target = find_amount(text, r"(?:target|desired)\s*(?:profit|income)")
        if target is not None:
            collector.compare("target units", (fixed + target) / margin, rep, STANDARD, "target-profit units mismatch",
                              aliases=("units", "q"), always=True)
        elif re.search(r"break[-\s]*even\s*(?:point\s*in\s*)?(?:sales|revenue|dollars)", lower):
            collector.compare("BE sales", fixed / margin * price, rep, MONEY, "break-even sales mismatch",
                              aliases=("sales", "revenue"), always=True)
        else:
            collector.compare("BE units", fixed / margin, rep, STANDARD, "break-even units mismatch",
                              aliases=("units", "q", "bep"), always=True)

    def _check_income(self, text, lower, rep, collector):
        if not re.search(r"net\s*income|income\s*statement|\bni\b|\bebit\b", lower):
            return
        interest = find_amount(text, r"interest(?:\s*expense)?") or 0.0
        ebit = find_amount(text, "ebit", r"operating\s*income")
        if ebit is None:
            sales = find_amount(text, r"net\s*sales", "sales", "revenue")
            cogs = find_amount(text, "cogs", r"cost\s*of\s*goods\s*sold")
            if sales is None or cogs is None:
                return
            expenses = sum(find_amount(text, name) or 0.0 for name in (
                r"(?:sg&a|sga|operating\s*expenses?)", r"(?:r&d|research\s*and\s*development)", r"depreciation(?:\s*expense)?"))
            ebit = sales - cogs - expenses
        ebt = ebit - interest
        tax_amount = find_amount(text, r"tax(?:es)?\s*expense", r"income\s*tax(?:es)?")
        rate_match = re.search(rf"tax\s*rate\s*(?:[:=]|of|is)?\s*{NUM}\s*(%)?", text, re.IGNORECASE)
        if tax_amount is not None:
            net = ebt - tax_amount
        elif rate_match:
            rate = float(rate_match.group(1))
            rate = rate / 100 if rate_match.group(2) or rate > 1 else rate
            net = ebt * (1 - rate)
        else:
            net = ebt
        collector.compare("NI", net, rep, MONEY, "net income mismatch", aliases=("net income", "profit"))
