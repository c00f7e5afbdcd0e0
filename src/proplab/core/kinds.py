"""
PropLab transaction type constants (the effectively fixed vocabulary).
"""


class K:
    # === Income kinds ===
    INCOME = "income"
    RENT = "rent"
    RENTAL = "rental"
    OTHER_INCOME = "other_income"

    # === Expense kinds ===
    EXPENSE = "expense"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    FEES = "fees"
    INSURANCE = "insurance"
    TAX = "tax"
    MANAGEMENT_FEE = "management_fee"
    INTEREST = "interest"

    # === Balance transfers (real cash, excluded from profit/loss) ===
    PRINCIPAL = "principal"

    @classmethod
    def income_kinds(cls) -> frozenset[str]:
        return frozenset({cls.INCOME, cls.RENT, cls.RENTAL, cls.OTHER_INCOME})

    @classmethod
    def expense_kinds(cls) -> frozenset[str]:
        return frozenset(
            {
                cls.EXPENSE,
                cls.MAINTENANCE,
                cls.REPAIR,
                cls.FEES,
                cls.INSURANCE,
                cls.TAX,
                cls.MANAGEMENT_FEE,
                cls.INTEREST,
            }
        )

    @classmethod
    def ignore_kinds(cls) -> frozenset[str]:
        return frozenset({cls.PRINCIPAL})

    @classmethod
    def all_kinds(cls) -> list[str]:
        """Enumerate all known kinds (for validation and docs)."""
        return [
            # income
            cls.INCOME,
            cls.RENT,
            cls.RENTAL,
            cls.OTHER_INCOME,
            # expense
            cls.EXPENSE,
            cls.MAINTENANCE,
            cls.REPAIR,
            cls.FEES,
            cls.INSURANCE,
            cls.TAX,
            cls.MANAGEMENT_FEE,
            cls.INTEREST,
            # ignored in profit/loss
            cls.PRINCIPAL,
        ]
