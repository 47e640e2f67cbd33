"""
집중 타이머 클라이언트
서버의 WebSocket 타이머에 접속해 세션을 시작하고 카운트다운을 출력합니다.
"""

import argparse
import asyncio
import json
from typing import Dict, Optional

import websockets
from websockets.exceptions import WebSocketException


def format_tick(timer: Dict) -> str:
    """tick 메시지를 한 줄로 표시"""
    block = timer.get("block") or {}
    return (f"블록 {timer['block_index'] + 1}/{timer['block_count']} "
            f"{block.get('label', '')} {timer['display']}")


class TimerClient:
    """WebSocket 타이머 클라이언트"""

    def __init__(self, server_url: str = "ws://localhost:8000/ws/timer"):
        self.server_url = server_url
        self.websocket = None
        self.session_active = False

    async def connect(self) -> bool:
        """서버에 연결"""
        try:
            self.websocket = await websockets.connect(self.server_url)
            print(f"서버에 연결되었습니다: {self.server_url}")
            return True
        except (OSError, WebSocketException) as e:
            print(f"서버 연결 실패: {e}")
            return False

    async def send(self, message: Dict):
        await self.websocket.send(json.dumps(message))

    async def start_session(self, subject_id: str, subject_name: str, minutes: int):
        """공부 세션 시작"""
        await self.send({
            "type": "start_session",
            "subject_id": subject_id,
            "subject_name": subject_name,
            "minutes": minutes,
        })
        self.session_active = True

    async def cancel_session(self):
        """공부 세션 취소"""
        if not self.websocket or not self.session_active:
            return
        await self.send({"type": "cancel"})
        self.session_active = False
        print("세션을 취소했습니다.")

    def handle_message(self, message: Dict) -> bool:
        """서버 메시지 출력. 세션이 끝났으면 False"""
        msg_type = message.get("type")

        if msg_type == "session_started":
            plan = message["plan"]
            print(f"플랜: {plan['subject_name']} (집중 {plan['total_focus_minutes']}분)")
            for block in plan["blocks"]:
                print(f"  - {block['label']}")
        elif msg_type == "tick":
            print("\r" + format_tick(message["timer"]), end="", flush=True)
        elif msg_type == "block_changed":
            print()
        elif msg_type == "session_completed":
            print("\n세션이 완료되었습니다.")
            self.session_active = False
            return False
        elif msg_type in ("session_cancelled", "error"):
            print(f"\n{message.get('message', msg_type)}")
            self.session_active = False
            return False
        return True

    async def run(self, subject_id: str, subject_name: str, minutes: int):
        """세션을 시작하고 완료될 때까지 카운트다운 표시"""
        if not await self.connect():
            return

        try:
            await self.start_session(subject_id, subject_name, minutes)
            async for raw in self.websocket:
                if not self.handle_message(json.loads(raw)):
                    break
        except (KeyboardInterrupt, asyncio.CancelledError):
            print("\n프로그램이 중단되었습니다.")
            await self.cancel_session()
        finally:
            if self.websocket:
                await self.websocket.close()


async def main(argv: Optional[list] = None):
    """메인 함수"""
    parser = argparse.ArgumentParser(description='집중 타이머 클라이언트')
    parser.add_argument('--server', type=str, default='ws://localhost:8000/ws/timer',
                        help='서버 WebSocket URL (기본값: ws://localhost:8000/ws/timer)')
    parser.add_argument('--subject', type=str, default='1',
                        help='과목 ID (기본값: 1)')
    parser.add_argument('--subject-name', type=str, default='Study',
                        help='과목 이름 (기본값: Study)')
    parser.add_argument('--minutes', type=int, default=60,
                        help='가용 시간 (분, 기본값: 60)')

    args = parser.parse_args(argv)

    client = TimerClient(server_url=args.server)
    await client.run(args.subject, args.subject_name, args.minutes)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
