"""Script para iniciar o servidor FastAPI na porta 8000."""
import os

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("clearstock.main:app", host="0.0.0.0", port=port, reload=True)
