from pharmadist.models.stored_value import StoredValue

__all__ = ["StoredValue"]
