from creditdesk.error_handler import ErrorHandler


def test_handle_exception_returns_payload():
    eh = ErrorHandler()
    out = eh.handle_exception(Exception("boom"), context={"k": "v"})
    assert out["success"] is False
    assert out["status_code"] == 500
    assert "internal error" in out["message"].lower()
    assert "boom" in out["metadata"]["error"]
    assert out["metadata"]["context"] == {"k": "v"}
