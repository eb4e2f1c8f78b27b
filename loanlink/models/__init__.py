from loanlink.models.loan import Loan
from loanlink.models.loan_application import LoanApplication
from loanlink.models.user import User

__all__ = [
    "Loan",
    "LoanApplication",
    "User",
]
