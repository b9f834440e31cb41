# run.py

import uvicorn

from pdf_mailer.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "pdf_mailer.main:app",
        host=settings.HOST,  # 0.0.0.0 accepts connections from any IP
        port=settings.PORT,
        reload=False
    )
