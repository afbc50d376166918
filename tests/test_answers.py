from dailyquiz.services.answers import AnswerService, SubmissionOutcome


def test_correct_answer_awards_points_once(client, auth, add_question, points_of, answers_of):
    q = add_question(correct_option="B", points=5)
    hdr = auth("alice")
    r = client.post("/v1/answer", headers=hdr, json={"question_id": q["id"], "selected_option": "B"})
    assert r.status_code == 200
    assert r.json() == {"status": "submitted"}
    assert points_of("alice") == 5
    rows = answers_of("alice")
    assert len(rows) == 1 and rows[0].is_correct is True and rows[0].selected_option == "B"


def test_incorrect_answer_leaves_total_unchanged(client, auth, add_question, points_of, answers_of):
    q = add_question(correct_option="B", points=5)
    r = client.post("/v1/answer", headers=auth("bob"), json={"question_id": q["id"], "selected_option": "C"})
    assert r.json() == {"status": "submitted"}
    assert points_of("bob") == 0
    assert answers_of("bob")[0].is_correct is False


def test_resubmission_is_already_submitted(client, auth, add_question, points_of, answers_of):
    q = add_question(correct_option="A", points=3)
    hdr = auth("carol")
    first = client.post("/v1/answer", headers=hdr, json={"question_id": q["id"], "selected_option": "A"})
    second = client.post("/v1/answer", headers=hdr, json={"question_id": q["id"], "selected_option": "A"})
    third = client.post("/v1/answer", headers=hdr, json={"question_id": q["id"], "selected_option": "D"})
    assert first.status_code == 200
    assert second.status_code == 409 and second.json()["status"] == "already_submitted"
    assert third.status_code == 409
    assert len(answers_of("carol")) == 1
    assert points_of("carol") == 3


def test_response_hides_correctness(client, auth, add_question):
    q = add_question(correct_option="C", points=7)
    for user, option in (("dan", "C"), ("erin", "A")):
        body = client.post("/v1/answer", headers=auth(user),
                           json={"question_id": q["id"], "selected_option": option}).json()
        assert body == {"status": "submitted"}
        assert "C" not in str(body) and "7" not in str(body)


def test_option_is_case_insensitive(client, auth, add_question, points_of):
    q = add_question(correct_option="D", points=2)
    r = client.post("/v1/answer", headers=auth("frank"), json={"question_id": q["id"], "selected_option": "d"})
    assert r.status_code == 200
    assert points_of("frank") == 2


def test_invalid_payloads(client, auth, add_question):
    q = add_question()
    hdr = auth("gina")
    assert client.post("/v1/answer", headers=hdr, json={"selected_option": "A"}).status_code == 400
    assert client.post("/v1/answer", headers=hdr, json={"question_id": q["id"], "selected_option": "E"}).status_code == 400
    assert client.post("/v1/answer", headers=hdr, json={"question_id": q["id"]}).status_code == 400
    r = client.post("/v1/answer", headers=hdr, content=b"not json")
    assert r.status_code == 400


def test_unknown_question(client, auth):
    r = client.post("/v1/answer", headers=auth("hank"), json={"question_id": "missing", "selected_option": "A"})
    assert r.status_code == 404
    assert r.json()["error"]["type"] == "not_found"


def test_requires_valid_session(client, add_question):
    q = add_question()
    body = {"question_id": q["id"], "selected_option": "A"}
    assert client.post("/v1/answer", json=body).status_code == 401
    assert client.post("/v1/answer", json=body, headers={"Authorization": "Token abc"}).status_code == 401
    assert client.post("/v1/answer", json=body, headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_first_answer_creates_user_row(client, auth, add_question, db):
    from dailyquiz.models.orm import User
    q = add_question()
    client.post("/v1/answer", headers=auth("ivy"), json={"question_id": q["id"], "selected_option": "A"})
    user = db.get(User, "ivy")
    assert user.role == "user" and user.email == "ivy@example.com"


def test_service_second_session_sees_constraint(app, client, add_question, points_of):
    q = add_question(correct_option="A", points=4)
    with app.state.session_factory() as s1, app.state.session_factory() as s2:
        first = AnswerService(s1).submit("jack", q["id"], "A")
        second = AnswerService(s2).submit("jack", q["id"], "A")
    assert first is SubmissionOutcome.SUBMITTED
    assert second is SubmissionOutcome.ALREADY_SUBMITTED
    assert points_of("jack") == 4


def test_non_json_body_is_validation_error(client, auth):
    hdr = auth("gus") | {"Content-Type": "text/plain"}
    r = client.post("/v1/answer", headers=hdr, content=b"not json")
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["type"] == "validation_error"
    assert all("input" not in d and "ctx" not in d for d in error["details"])


def test_concurrent_submissions_award_once(tmp_path):
    from concurrent.futures import ThreadPoolExecutor
    from threading import Barrier

    from sqlalchemy import event, select

    from dailyquiz.core.config import Settings
    from dailyquiz.core.database import build_engine, build_session_factory
    from dailyquiz.models.orm import Answer, Base, User
    from dailyquiz.services.questions import QuestionRepository

    engine = build_engine(Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'quiz.db'}"))

    # take the write lock when the transaction starts so sessions queue on the busy timeout
    @event.listens_for(engine, "connect")
    def _manual_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    factory = build_session_factory(engine)
    with factory() as s:
        q = QuestionRepository(s).create({
            "q_date": "2024-03-13", "question_text": "Which?",
            "option_a": "A", "option_b": "B", "option_c": "C", "option_d": "D",
            "correct_option": "A", "points": 7,
        })

    workers = 6
    barrier = Barrier(workers)

    def submit(_):
        barrier.wait()
        with factory() as s:
            return AnswerService(s).submit("racer", q["id"], "A")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(submit, range(workers)))

    assert outcomes.count(SubmissionOutcome.SUBMITTED) == 1
    assert outcomes.count(SubmissionOutcome.ALREADY_SUBMITTED) == workers - 1
    with factory() as s:
        assert len(s.scalars(select(Answer).where(Answer.user_id == "racer")).all()) == 1
        assert s.get(User, "racer").total_points == 7
    engine.dispose()
