import argparse
import asyncio
import random

import httpx

# --- ROBOT DEFINITION ---
MOTOR_COUNT = 4
DEFAULT_SPEED = 50   # % used while a button is held
MAX_RPM = 330.0      # encoder reading at 100 % duty

# Holding a button drives all four wheels; values are per-motor directions.
# Motors 0/1 are the left side, 2/3 the right side.
BUTTON_ACTIONS = {
    0: ("FORWARD", ["forward", "forward", "forward", "forward"]),
    1: ("ROTATE LEFT", ["backward", "backward", "forward", "forward"]),
    2: ("ROTATE RIGHT", ["forward", "forward", "backward", "backward"]),
    3: ("BACKWARD", ["backward", "backward", "backward", "backward"]),
}

# --- ROBOT STATE ---
ROBOT = {
    "buttons": [False] * MOTOR_COUNT,
    "directions": ["stop"] * MOTOR_COUNT,
    "speeds": [0] * MOTOR_COUNT,
}

# --- MESSAGE BUILDERS (same shapes the firmware prints over UART) ---
def button_event(button_id, pressed):
    return {"button": button_id, "state": "pressed" if pressed else "released"}

def motor_event(motor_id, direction, speed):
    return {"motor": motor_id, "direction": direction, "speed": speed}

def all_motors_event(directions, speeds):
    return {
        "motors": [
            {"state": "running" if d != "stop" else "stopped", "speed": s}
            for d, s in zip(directions, speeds)
        ]
    }

def rpm_event(motor_id, rpm):
    return {"motor": motor_id, "rpm": round(rpm, 1)}

def estimate_rpm(speed, jitter=0.0):
    if speed <= 0:
        return 0.0
    return max(0.0, MAX_RPM * speed / 100 + jitter)

# --- BUTTON CONTROL ---
def _motor_report():
    return [
        motor_event(i, ROBOT["directions"][i], ROBOT["speeds"][i])
        for i in range(MOTOR_COUNT)
    ]

def press_button(button_id, speed=DEFAULT_SPEED):
    """Hold a button: drive the wheels and return what the robot reports."""
    label, directions = BUTTON_ACTIONS[button_id]
    ROBOT["buttons"][button_id] = True
    ROBOT["directions"] = list(directions)
    ROBOT["speeds"] = [speed] * MOTOR_COUNT
    print(f"[SIM] BTN_{button_id} -> {label} {speed}%")
    return [button_event(button_id, True)] + _motor_report()

def release_button(button_id):
    ROBOT["buttons"][button_id] = False
    ROBOT["directions"] = ["stop"] * MOTOR_COUNT
    ROBOT["speeds"] = [0] * MOTOR_COUNT
    print(f"[SIM] BTN_{button_id} released -> STOP ALL")
    return [button_event(button_id, False)] + _motor_report()

def snapshot():
    """Periodic frame: all-motor state plus one encoder reading per motor."""
    messages = [all_motors_event(ROBOT["directions"], ROBOT["speeds"])]
    for i, speed in enumerate(ROBOT["speeds"]):
        messages.append(rpm_event(i, estimate_rpm(speed, random.uniform(-5, 5))))
    return messages

# --- TRANSPORT ---
async def push(client, payload):
    response = await client.post("/data", json=payload)
    response.raise_for_status()
    return response.json()

async def stream_data(base_url, interval=0.5):
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        status = (await client.get("/status")).json()
        print(f"[SIM] ROBOT ONLINE -> {base_url} (server port {status['port']})")

        held = None
        while True:
            messages = []
            if held is None and random.random() < 0.3:
                held = random.randrange(MOTOR_COUNT)
                messages += press_button(held)
            elif held is not None and random.random() < 0.2:
                messages += release_button(held)
                held = None
            messages += snapshot()

            for payload in messages:
                try:
                    await push(client, payload)
                except httpx.HTTPError as e:
                    print(f"[SIM] push failed: {e}")

            await asyncio.sleep(interval)

def main(argv=None):
    parser = argparse.ArgumentParser(description="Fake STM32 + ESP bridge")
    parser.add_argument("--url", default="http://127.0.0.1:3000", help="Server base URL")
    parser.add_argument("--interval", type=float, default=0.5, help="Seconds between frames")
    args = parser.parse_args(argv)
    try:
        asyncio.run(stream_data(args.url, args.interval))
    except KeyboardInterrupt:
        print("[SIM] stopped")

if __name__ == "__main__":
    main()
