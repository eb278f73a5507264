# ============================================================
# publisher.py — Émission d'événements RabbitMQ
# ------------------------------------------------------------
# Le Booking Service informe les autres services (Notification)
# d'un changement d'état : BookingCreated, BookingCancelled,
# ResourceClosed, ResourceReopened.
# ============================================================
import os, json, pika

RABBIT_HOST = os.getenv("RABBITMQ_HOST", "localhost")
EXCHANGE = "events"

# Publie un message sur l'échange "events" en mode fanout :
#
#   - event_type : nom de l'événement
#   - payload    : contenu du message
#
# Tous les consommateurs liés à l'échange reçoivent le message.

def publish_event(event_type: str, payload: dict):
    conn = pika.BlockingConnection(pika.ConnectionParameters(host=RABBIT_HOST))
    try:
        ch = conn.channel()
        # durable=True pour survivre aux redémarrages RabbitMQ
        ch.exchange_declare(exchange=EXCHANGE, exchange_type="fanout", durable=True)
        message = {"type": event_type, "payload": payload}
        ch.basic_publish(exchange=EXCHANGE, routing_key="", body=json.dumps(message, default=str))
        print(f"[event] {event_type} {payload}", flush=True)
    finally:
        conn.close()
