"""HTTP routers for the TrueBlazer backend."""
