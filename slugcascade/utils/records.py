def record_to_dict(instance):
    """
    Returns the stored field values of a model instance, keyed by column
    attribute name (``parent_id`` rather than ``parent``).
    """
    return {
        field.attname: field.value_from_object(instance)
        for field in instance._meta.concrete_fields
    }
