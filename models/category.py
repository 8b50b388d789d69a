import enum


class Category(str, enum.Enum):
    HOUSING = "Housing"
    TRANSPORTATION = "Transportation"
    FOOD = "Food"
    UTILITIES = "Utilities"
    INSURANCE = "Insurance"
    HEALTHCARE = "Healthcare"
    SAVINGS = "Savings"
    PERSONAL = "Personal"
    ENTERTAINMENT = "Entertainment"
    EDUCATION = "Education"
    CLOTHING = "Clothing"
    GIFTS = "Gifts"
    INCOME = "Income"
    OTHER = "Other"


# Liste fixe renvoyée telle quelle par /api/categories
CATEGORIES = [c.value for c in Category]

# Pas de budget possible sur les revenus
BUDGET_CATEGORIES = [c.value for c in Category if c is not Category.INCOME]
