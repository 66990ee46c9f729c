import pytest

from task_client import state as st
from task_client.state import Action, AppState, initial_state, reduce, fetch_key

USER = {"id": "u1", "email": "a@x.com", "role": "standard_user", "token": "tok"}


def dispatch(state, action_type, payload=None):
    return reduce(state, Action(action_type, payload))


@pytest.mark.unit
class TestViews:
    def test_starts_on_login_without_cached_user(self):
        assert initial_state().view == st.LOGIN

    def test_cached_user_resumes_on_dashboard(self):
        state = initial_state(USER)
        assert state.view == st.DASHBOARD
        assert state.token == "tok"

    def test_login_success_moves_to_dashboard_and_clears_error(self):
        state = dispatch(AppState(error="boom"), st.LOGIN_SUCCESS, USER)
        assert state.view == st.DASHBOARD
        assert state.user == USER
        assert state.error is None

    def test_toggle_auth_form(self):
        state = dispatch(initial_state(), st.SET_VIEW, st.REGISTER)
        assert state.view == st.REGISTER
        assert dispatch(state, st.SET_VIEW, st.LOGIN).view == st.LOGIN

    def test_logout_resets_everything(self):
        state = initial_state(USER)
        state = dispatch(state, st.SET_FILTER_STATUS, "Completed")
        state = dispatch(state, st.SET_SEARCH_KEYWORD, "api")
        state = dispatch(state, st.SET_ERROR, "oops")

        assert dispatch(state, st.LOGOUT) == AppState(view=st.LOGIN)


@pytest.mark.unit
class TestListState:
    def test_filter_and_keyword_reset_page(self):
        state = dispatch(initial_state(USER), st.SET_PAGE, 4)

        assert dispatch(state, st.SET_FILTER_STATUS, "Pending").current_page == 1
        assert dispatch(state, st.SET_SEARCH_KEYWORD, "x").current_page == 1
        assert dispatch(state, st.SET_PAGE, 2).current_page == 2

    def test_set_tasks_copies_envelope(self):
        envelope = {"items": [{"id": "t1"}], "page": 2, "pageCount": 3, "totalCount": 21, "pageSize": 10}
        state = dispatch(AppState(loading=True), st.SET_TASKS, envelope)

        assert state.tasks == ({"id": "t1"},)
        assert (state.current_page, state.total_pages, state.total_tasks, state.tasks_per_page) == (2, 3, 21, 10)
        assert state.loading is False

    @pytest.mark.parametrize("action_type", [st.TASK_CREATED, st.TASK_UPDATED, st.TASK_DELETED])
    def test_mutations_bump_revision(self, action_type):
        state = initial_state(USER)
        assert dispatch(state, action_type).revision == state.revision + 1

    def test_unknown_action_is_a_no_op(self):
        state = initial_state(USER)
        assert dispatch(state, "NOT_AN_ACTION") is state


@pytest.mark.unit
class TestFetchKey:
    def test_none_outside_dashboard(self):
        assert fetch_key(initial_state()) is None
        assert fetch_key(dispatch(initial_state(USER), st.SET_VIEW, st.LOGIN)) is None

    def test_changes_with_every_list_input(self):
        base = initial_state(USER)
        keys = {
            fetch_key(base),
            fetch_key(dispatch(base, st.SET_FILTER_STATUS, "Completed")),
            fetch_key(dispatch(base, st.SET_SEARCH_KEYWORD, "api")),
            fetch_key(dispatch(base, st.SET_PAGE, 2)),
            fetch_key(dispatch(base, st.TASK_DELETED)),
        }
        assert len(keys) == 5

    def test_loading_and_error_do_not_refetch(self):
        base = initial_state(USER)
        assert fetch_key(dispatch(base, st.SET_LOADING, True)) == fetch_key(base)
        assert fetch_key(dispatch(base, st.SET_ERROR, "x")) == fetch_key(base)
