import queue
import threading
import time

from tqdm import tqdm


class LogSink:
    """
    複数のワーカーから届くメッセージを1つのスレッドで順に表示するログ出力先。

    put() はキューが空くまで待つだけで、表示処理そのものはワーカーから切り離されています。
    同じワーカーからのメッセージは送った順に表示されます。
    """

    def __init__(self, maxsize=10, writer=None, interval=0.0):
        self.queue = queue.Queue(maxsize=maxsize)
        self.writer = writer if writer is not None else tqdm.write
        self.interval = interval
        self.stop_event = threading.Event()
        self.thread = None

    # ---------------------- Public API --------------------------
    def start(self):
        if self.thread is not None:
            return self
        self.stop_event.clear()
        self.thread = threading.Thread(target=self._consume_loop, daemon=True)
        self.thread.start()
        return self

    def put(self, message):
        self.queue.put(message)

    def close(self):
        # 残っているメッセージを出し切ってから止める
        self.stop_event.set()
        if self.thread is not None:
            self.thread.join()
            self.thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ---------------------- Consumer ----------------------------
    def _consume_loop(self):
        while not (self.stop_event.is_set() and self.queue.empty()):
            try:
                message = self.queue.get(timeout=0.05)
            except queue.Empty:
                continue

            self.writer(message)
            if self.interval > 0:
                time.sleep(self.interval)
