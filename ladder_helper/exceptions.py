class LadderHelperError(Exception):
    """Base exception for the ladder helper worker"""
    pass


class TransientStoreError(LadderHelperError):
    """The store failed while claiming a session; nothing was changed"""
    pass


class DeliveryError(LadderHelperError):
    """A chat message could not be sent or edited"""
    pass
