from composeapp.domain.bundle.util.di.provider import BundleProvider, ProgressProvider

__all__ = ["BundleProvider", "ProgressProvider"]
