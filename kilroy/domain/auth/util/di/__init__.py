from kilroy.domain.auth.util.di.provider import AuthProvider

__all__ = ["AuthProvider"]
