import calendar
from typing import List, Dict, Optional, Tuple
from collections import defaultdict
from datetime import date, MINYEAR

DEFAULT_CATEGORY = 'Other'
INCOME_CATEGORY = 'Income'


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """Premier et dernier jour du mois (bornes incluses)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_period(month: int, year: int) -> Optional[Tuple[int, int]]:
    """Mois précédent, None avant janvier de l'an 1"""
    if month == 1:
        if year <= MINYEAR:
            return None
        return 12, year - 1
    return month - 1, year


def spending_by_category(transactions: List[Dict]) -> Dict[str, float]:
    """Somme des valeurs absolues des dépenses (montant < 0) par catégorie"""
    spending = defaultdict(float)
    for transaction in transactions:
        if transaction['amount'] >= 0:
            continue
        category = transaction.get('category') or DEFAULT_CATEGORY
        spending[category] += abs(transaction['amount'])
    return dict(spending)


class AnalysisService:
    def __init__(self):
        # Seuils des conseils de dépenses
        self.change_threshold = 10  # variation mensuelle en %
        self.top_category_share = 30  # part de la catégorie principale en %
        self.large_transaction = 100
        self.max_large_transactions = 3
        self.good_savings_rate = 20

    def budget_vs_actual(self, budgets: List[Dict], transactions: List[Dict]) -> List[Dict]:
        """
        Compare les budgets d'une période aux dépenses réelles.

        Une ligne par budget, puis une ligne synthétique (budget 0, 100% utilisé)
        pour chaque catégorie dépensée sans budget, hors "Income".
        Les montants sont arrondis au centime.
        """
        actual_spending = spending_by_category(transactions)

        result = []
        for budget in budgets:
            category = budget['category']
            budget_amount = budget['amount']
            actual_amount = actual_spending.get(category, 0)
            percent_used = (actual_amount / budget_amount * 100) if budget_amount > 0 else 0

            result.append({
                'category': category,
                'budgetAmount': round(budget_amount, 2),
                'actualAmount': round(actual_amount, 2),
                'difference': round(budget_amount - actual_amount, 2),
                'percentUsed': round(percent_used, 2)
            })

        seen = {row['category'] for row in result}
        for category, actual_amount in actual_spending.items():
            if category in seen or category == INCOME_CATEGORY:
                continue
            result.append({
                'category': category,
                'budgetAmount': 0,
                'actualAmount': round(actual_amount, 2),
                'difference': round(-actual_amount, 2),
                'percentUsed': 100
            })

        return result

    def summarize(self, transactions: List[Dict], recent_count: int = 3) -> Dict:
        """Totaux revenus/dépenses/solde et dernières transactions"""
        total_income = sum(t['amount'] for t in transactions if t['amount'] > 0)
        total_expenses = sum(abs(t['amount']) for t in transactions if t['amount'] < 0)
        recent = sorted(transactions, key=lambda t: t['date'], reverse=True)[:recent_count]

        return {
            'totalBalance': round(total_income - total_expenses, 2),
            'totalIncome': round(total_income, 2),
            'totalExpenses': round(total_expenses, 2),
            'recentTransactions': recent
        }

    def monthly_totals(self, transactions: List[Dict]) -> List[Dict]:
        """Revenus, dépenses et solde par mois, du plus ancien au plus récent"""
        by_month = {}
        for transaction in transactions:
            day = transaction['date']
            key = (day.year, day.month)
            if key not in by_month:
                by_month[key] = {'income': 0.0, 'expenses': 0.0}
            if transaction['amount'] > 0:
                by_month[key]['income'] += transaction['amount']
            else:
                by_month[key]['expenses'] += abs(transaction['amount'])

        return [{
            'month': f"{year}-{month:02d}",
            'income': round(totals['income'], 2),
            'expenses': round(totals['expenses'], 2),
            'balance': round(totals['income'] - totals['expenses'], 2)
        } for (year, month), totals in sorted(by_month.items())]

    def category_breakdown(self, transactions: List[Dict]) -> List[Dict]:
        """Répartition des dépenses par catégorie, de la plus forte à la plus faible"""
        spending = spending_by_category(transactions)
        total = sum(spending.values())
        if total <= 0:
            return []

        breakdown = [{
            'category': category,
            'amount': round(amount, 2),
            'percentage': round(amount / total * 100, 1)
        } for category, amount in spending.items()]
        breakdown.sort(key=lambda item: item['amount'], reverse=True)
        return breakdown

    def spending_insights(self, current: List[Dict], previous: List[Dict]) -> List[Dict]:
        """
        Génère des conseils pour un mois à partir de ses transactions
        et de celles du mois précédent
        """
        if not current:
            return []

        insights = []
        current_expenses = sum(abs(t['amount']) for t in current if t['amount'] < 0)
        previous_expenses = sum(abs(t['amount']) for t in previous if t['amount'] < 0)

        # Comparaison avec le mois précédent
        if previous_expenses > 0:
            change = (current_expenses - previous_expenses) / previous_expenses * 100
            if change <= -self.change_threshold:
                insights.append({
                    'type': 'success',
                    'title': 'Reduced Spending',
                    'message': f'Your spending this month is down by {abs(change):.1f}% compared to last month. Great job!'
                })
            elif change >= self.change_threshold:
                insights.append({
                    'type': 'warning',
                    'title': 'Increased Spending',
                    'message': f'Your spending this month is up by {change:.1f}% compared to last month. You might want to review your expenses.'
                })

        # Catégorie la plus dépensière
        spending = spending_by_category(current)
        if spending and current_expenses > 0:
            top_category, top_amount = max(spending.items(), key=lambda x: x[1])
            share = top_amount / current_expenses * 100
            if share >= self.top_category_share:
                insights.append({
                    'type': 'info',
                    'title': 'Top Spending Category',
                    'message': f'{share:.1f}% of your spending this month is in the {top_category} category.'
                })

        # Grosses dépenses
        large = sorted(
            (t for t in current if t['amount'] < 0 and abs(t['amount']) > self.large_transaction),
            key=lambda t: abs(t['amount']),
            reverse=True
        )[:self.max_large_transactions]
        if large:
            noun = 'transaction' if len(large) == 1 else 'transactions'
            insights.append({
                'type': 'info',
                'title': 'Large Transactions',
                'message': f'You had {len(large)} large {noun} this month.',
                'details': [f"{t['description']}: ${abs(t['amount']):.2f}" for t in large]
            })

        # Taux d'épargne
        current_income = sum(t['amount'] for t in current if t['amount'] > 0)
        if current_income > 0 and current_expenses > 0:
            savings_rate = (current_income - current_expenses) / current_income * 100
            if savings_rate >= self.good_savings_rate:
                insights.append({
                    'type': 'success',
                    'title': 'Great Savings Rate',
                    'message': f"You're saving {savings_rate:.1f}% of your income this month. Keep it up!"
                })
            elif savings_rate < 0:
                insights.append({
                    'type': 'warning',
                    'title': 'Spending More Than Income',
                    'message': "You're spending more than your income this month. Consider reviewing your budget."
                })

        return insights
