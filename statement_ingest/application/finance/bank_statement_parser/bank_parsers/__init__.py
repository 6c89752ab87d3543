"""Statement line parsers."""

from .base_parser import AccumulationState, BaseTransactionParser, ParserSession
from .multiline_parser import MultilineTransactionParser
from .standard_bank_parser import StandardBankParser
from .absa_parser import AbsaParser
from .fnb_parser import FnbParser
from .multi_transaction_parser import MultiTransactionParser
from .service_fee_parser import ServiceFeeParser
from .credit_parser import CreditParser
from .parser_factory import ParserFactory

__all__ = [
    "AccumulationState",
    "BaseTransactionParser",
    "ParserSession",
    "MultilineTransactionParser",
    "StandardBankParser",
    "AbsaParser",
    "FnbParser",
    "MultiTransactionParser",
    "ServiceFeeParser",
    "CreditParser",
    "ParserFactory",
]
