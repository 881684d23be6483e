import logging
import sys

from fastapi import FastAPI, Response, status
from pydantic import BaseModel, Field

logging.basicConfig(stream=sys.stdout, level=logging.INFO, format="%(asctime)sZ %(levelname)s %(message)s")

app = FastAPI(title="SMS Gateway Mock", version="1.0.0")

# last messages per phone, handy when poking the API by hand
outbox: dict[str, list[str]] = {}


class SendSms(BaseModel):
    to: str = Field(..., min_length=3)
    sender: str = Field("", alias="from")
    body: str


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/send", status_code=status.HTTP_202_ACCEPTED)
async def send(payload: SendSms) -> Response:
    outbox.setdefault(payload.to, []).append(payload.body)
    logging.info("SMS-MOCK send to=%s from=%s body=%r", payload.to, payload.sender, payload.body)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@app.get("/messages/{phone}")
def messages(phone: str) -> dict:
    return {"to": phone, "messages": outbox.get(phone, [])}
