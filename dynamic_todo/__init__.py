"""Dynamic Todo: FastAPI service around the uikernel tree engine."""
