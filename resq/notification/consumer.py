import os, json, pika, time
RABBIT = os.getenv("RABBITMQ_HOST", "rabbitmq")

MESSAGES = {
    "BookingCreated": "Your evacuation booking #{bookingId} is confirmed (resource {resourceId}).",
    "BookingCancelled": "Your evacuation booking #{bookingId} has been cancelled.",
    "ResourceClosed": "Resource {resourceId} is closed until further notice.",
    "ResourceReopened": "Resource {resourceId} is open again ({status}).",
}

def render(event_type: str, payload: dict):
    template = MESSAGES.get(event_type)
    if template is None:
        return None
    try:
        return template.format(**payload)
    except KeyError:
        return None

def on_message(ch, method, properties, body):
    try:
        msg = json.loads(body)
    except ValueError:
        return
    # JSON valide mais pas un objet : ignoré
    if not isinstance(msg, dict):
        return
    t = msg.get("type")
    p = msg.get("payload")
    if not isinstance(p, dict):
        return
    text = render(t, p)
    if text is None:
        return
    to = p.get("requesterId", "coordinators")
    print(f"[notification] {t} -> mock sms to {to}: {text}", flush=True)

def start_consumer():
    while True:
        try:
            print("[notification] connecting to rabbitmq...", flush=True)
            conn = pika.BlockingConnection(pika.ConnectionParameters(RABBIT, heartbeat=60))
            ch = conn.channel()
            ch.exchange_declare(exchange="events", exchange_type="fanout", durable=True)
            q = ch.queue_declare(queue="", exclusive=True).method.queue
            ch.queue_bind(exchange="events", queue=q)
            print("[notification] bound to 'events'. waiting...", flush=True)
            ch.basic_consume(queue=q, on_message_callback=on_message, auto_ack=True)
            ch.start_consuming()
        except Exception as e:
            print(f"[notification] error: {e} - retry 5s", flush=True)
            time.sleep(5)
