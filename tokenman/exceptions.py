"""
Exceptions for Tokenman.

Hard failures carry a structured code for programmatic handling.
Business rejections are NOT exceptions: see tokenman.validation.Verdict.
"""

from decimal import Decimal
from typing import Any


class TokenmanError(Exception):
    """
    Base structured exception.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class DomainError(TokenmanError):
    """
    Calculation or reference-data error.

    Raised by the pricing and margin layers; aborts a validation instead
    of turning into a rejection.

    Usage:
        try:
            tokens.validate(request)
        except DomainError as e:
            if e.code == 'MISSING_RATES':
                ...
    """

    _default_messages = {
        'INVALID_NUMBER': 'Valor numérico inválido',
        'INVALID_QUANTITY': 'Quantidade solicitada deve ser maior que zero',
        'MISSING_RATES': 'Produto sem custo/alíquota cadastrados para o estado',
        'MISSING_REGION': 'Loja sem estado cadastrado',
        'DEGENERATE_TAX_RATE': 'Soma de alíquota e PIS/COFINS deve ser menor que 100%',
        'DEGENERATE_MARGIN': 'Margem deve ser menor que 100%',
        'INVALID_PRICE_FOR_MARGIN': 'Preço deve ser positivo para calcular a margem',
    }


class TokenError(TokenmanError):
    """
    Structured exception for token lifecycle and quota operations.

    Usage:
        try:
            tokens.approve(code)
        except TokenError as e:
            if e.code == 'INVALID_TRANSITION':
                print(f"Token já está {e.current}")
    """

    _default_messages = {
        'TOKEN_NOT_FOUND': 'Token não encontrado',
        'INVALID_TRANSITION': 'Token já foi validado',
        'NOT_ACCEPTED': 'Solicitação reprovada não pode gerar token',
        'QUOTA_EXHAUSTED': 'Não possui Token Disponível para a loja',
        'INVALID_QUANTITY': 'Quantidade inválida (não pode ser negativa)',
        'CODE_GENERATION_FAILED': 'Não foi possível gerar um código de token único',
    }

    @property
    def current(self) -> str | None:
        """Shortcut for data['current']."""
        return self.data.get('current')
