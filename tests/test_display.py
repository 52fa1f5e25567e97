from conftest import make_frame
from picam import display
from picam.display import PreviewWindow


def test_disabled_preview_is_a_no_op(monkeypatch):
    calls = []
    monkeypatch.setattr(display.cv2, "imshow", lambda *args: calls.append("imshow"))
    monkeypatch.setattr(display.cv2, "destroyAllWindows", lambda: calls.append("destroy"))

    preview = PreviewWindow(enabled=False)
    assert preview.show(make_frame()) is False
    preview.close()
    assert calls == []


def test_quit_key_detected_and_window_closed_once(monkeypatch):
    keys = iter([-1, ord("x"), ord("q")])
    destroyed = []
    monkeypatch.setattr(display.cv2, "imshow", lambda name, frame: None)
    monkeypatch.setattr(display.cv2, "waitKey", lambda delay: next(keys))
    monkeypatch.setattr(display.cv2, "destroyAllWindows", lambda: destroyed.append(True))

    preview = PreviewWindow(enabled=True)
    results = [preview.show(make_frame()) for _ in range(3)]
    preview.close()
    preview.close()

    assert results == [False, False, True]
    assert destroyed == [True]
