"""Payment values shared across test modules."""

NETWORK = "aptos:2"
ASSET = "0x" + "a1" * 32
RECIPIENT = "0x" + "b2" * 32
AMOUNT = 5000
