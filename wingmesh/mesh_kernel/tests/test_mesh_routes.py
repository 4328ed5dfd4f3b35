import pytest
from fastapi.testclient import TestClient

from wingmesh.mesh_kernel.routes import get_service
from wingmesh.mesh_kernel.service import MeshService
from wingmesh.server import create_app

app = create_app()


@pytest.fixture
def client():
    service = MeshService()
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _error(resp):
    return resp.json()["detail"]["error"]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_primitive_subdivide_stats(client):
    resp = client.post("/mesh/primitives", json={"kind": "QUAD_BOX"})
    assert resp.status_code == 201
    mesh_id = resp.json()["id"]

    resp = client.post(f"/mesh/{mesh_id}/subdivide", json={"iterations": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["vertices"]) == 26
    assert len(body["indices"]) == 24 * 4
    assert body["subdivision_level"] == 1

    resp = client.get(f"/mesh/{mesh_id}/stats")
    assert resp.status_code == 200
    assert resp.json()["edge_count"] == 48
    assert resp.json()["euler_characteristic"] == 2

    resp = client.post(f"/mesh/{mesh_id}/revert")
    assert resp.status_code == 200
    assert len(resp.json()["vertices"]) == 8

    resp = client.get(f"/mesh/{mesh_id}")
    assert resp.json()["subdivision_level"] == 0


def test_import_and_delete(client):
    payload = {"vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0]], "indices": [0, 1, 2], "arity": 3}
    resp = client.post("/mesh/import", json=payload)
    assert resp.status_code == 201
    mesh_id = resp.json()["id"]

    resp = client.delete(f"/mesh/{mesh_id}")
    assert resp.status_code == 204

    resp = client.get(f"/mesh/{mesh_id}")
    assert resp.status_code == 404
    assert _error(resp)["code"] == "mesh.not_found"


def test_import_non_manifold(client):
    payload = {"vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0]], "indices": [0, 1, 2, 0, 1, 2], "arity": 3}
    resp = client.post("/mesh/import", json=payload)

    assert resp.status_code == 422
    err = _error(resp)
    assert err["code"] == "mesh.non_manifold_edge"
    assert err["details"]["start"] == 0


def test_import_bad_arity(client):
    payload = {"vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0], [2, 2, 0]], "indices": [0, 1, 2, 3, 4], "arity": 5}
    resp = client.post("/mesh/import", json=payload)

    assert resp.status_code == 422
    assert _error(resp)["code"] == "mesh.invalid_topology"


def test_invalid_iterations(client):
    mesh_id = client.post("/mesh/primitives", json={}).json()["id"]

    resp = client.post(f"/mesh/{mesh_id}/subdivide", json={"iterations": 0})
    assert resp.status_code == 422
    assert _error(resp)["code"] == "mesh.invalid_iteration_count"


def test_unknown_mesh(client):
    resp = client.post("/mesh/missing/subdivide", json={"iterations": 1})
    assert resp.status_code == 404
    assert _error(resp)["details"] == {"id": "missing"}


def test_instructions(client):
    resp = client.post("/mesh/instructions", json={"op_code": "PRIMITIVE", "params": {"kind": "BOX"}})
    assert resp.status_code == 200
    mesh_id = resp.json()["id"]
    assert resp.json()["arity"] == 3

    resp = client.post(
        "/mesh/instructions",
        json={"op_code": "SUBDIVIDE", "params": {"iterations": 1}, "target_id": mesh_id},
    )
    assert resp.status_code == 200
    assert resp.json()["arity"] == 4
    assert len(resp.json()["vertices"]) == 38

    resp = client.post("/mesh/instructions", json={"op_code": "SCULPT", "target_id": mesh_id})
    assert resp.status_code == 400
    assert _error(resp)["code"] == "mesh.instruction_unhandled"


def test_instruction_bad_params(client):
    resp = client.post("/mesh/instructions", json={"op_code": "PRIMITIVE", "params": {"kind": "SPHERE"}})
    assert resp.status_code == 422
    assert _error(resp)["code"] == "mesh.invalid_params"


def test_instruction_unknown_target(client):
    resp = client.post("/mesh/instructions", json={"op_code": "SUBDIVIDE", "target_id": "missing"})

    assert resp.status_code == 404
    assert _error(resp)["code"] == "mesh.not_found"
    assert _error(resp)["details"] == {"id": "missing"}
