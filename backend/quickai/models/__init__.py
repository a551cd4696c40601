from quickai.models.creation import Creation

__all__ = ["Creation"]
