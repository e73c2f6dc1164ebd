"""
Django Tokenman — Discount Token Approval Engine.

Grants point-of-sale price exceptions to stores under a margin policy
hierarchy, against a finite per-store token quota.

Uso:
    from tokenman import tokens, TokenRequest, TokenError

    result = tokens.submit(TokenRequest(produto, loja, Decimal('19.90')))
    result.outcome      # issued / rejected / exhausted
    tokens.approve(result.code)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'tokens':
        from tokenman.service import Tokens
        return Tokens
    elif name == 'TokenRequest':
        from tokenman.validation import TokenRequest
        return TokenRequest
    elif name == 'Verdict':
        from tokenman.validation import Verdict
        return Verdict
    elif name == 'RejectionCode':
        from tokenman.validation import RejectionCode
        return RejectionCode
    elif name == 'Submission':
        from tokenman.service import Submission
        return Submission
    elif name == 'SubmissionOutcome':
        from tokenman.service import SubmissionOutcome
        return SubmissionOutcome
    elif name == 'TokenError':
        from tokenman.exceptions import TokenError
        return TokenError
    elif name == 'DomainError':
        from tokenman.exceptions import DomainError
        return DomainError
    elif name == 'Token':
        from tokenman.models.token import Token
        return Token
    elif name == 'TokenStatus':
        from tokenman.models.enums import TokenStatus
        return TokenStatus
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'tokens',
    'TokenRequest',
    'Verdict',
    'RejectionCode',
    'Submission',
    'SubmissionOutcome',
    'TokenError',
    'DomainError',
    'Token',
    'TokenStatus',
]

__version__ = '0.1.0'
