from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.envelope import EnvelopeCipher
from dataset_transfer.encryption.factory import KeyWrapperFactory
from dataset_transfer.encryption.local_key_wrapper import LocalKeyWrapper

__all__ = ["BaseKeyWrapper", "EnvelopeCipher", "KeyWrapperFactory", "LocalKeyWrapper"]
