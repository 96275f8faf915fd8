"""HTTP host for the wallet vault and the balance relay."""
