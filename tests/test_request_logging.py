import logging

from zkchan_backend.middleware_logging import job_id_from_path


def test_job_id_from_path():
    assert job_id_from_path("/bridge/job/abc-123") == "abc-123"
    assert job_id_from_path("/bridge/job/abc-123/execute") == "abc-123"
    assert job_id_from_path("/bridge/submit") is None
    assert job_id_from_path("/health") is None


def test_job_routes_log_the_job_id(client, transfer, caplog):
    job_id = client.post("/bridge/submit", json=transfer).json()["jobId"]
    caplog.clear()

    with caplog.at_level(logging.INFO, logger="zkchan.request"):
        client.post(f"/bridge/job/{job_id}/execute")

    lines = [r.getMessage() for r in caplog.records if r.name == "zkchan.request"]
    assert len(lines) == 1
    assert f"job={job_id}" in lines[0]
    assert "status=200" in lines[0]


def test_server_errors_log_as_warning(make_client, transfer, caplog):
    client = make_client(ENABLE_EVM_SEND="true")
    job_id = client.post("/bridge/submit", json=transfer).json()["jobId"]

    with caplog.at_level(logging.INFO, logger="zkchan.request"):
        client.post(f"/bridge/job/{job_id}/execute")

    record = next(r for r in caplog.records if r.name == "zkchan.request")
    assert record.levelno == logging.WARNING
    assert "status=500" in record.getMessage()
