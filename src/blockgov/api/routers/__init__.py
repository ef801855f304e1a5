"""HTTP routers for the BlockGov API."""
