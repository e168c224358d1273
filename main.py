#This file is for development purposes only

import logging

from board_workflow_engine import build_backlog, fetch_board
from board_workflow_interface.items import BACKLOG_CONTAINER, SprintStatus
from tracker_client_impl import get_client


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    client = get_client(interactive=True)

    # Show the board of the active sprint, else a sprint still in planning, else the backlog
    try:
        open_sprints = [s for s in client.fetch_sprints() if s.is_open]
        open_sprints.sort(key=lambda s: s.status != SprintStatus.ACTIVE)
        container = open_sprints[0].id if open_sprints else BACKLOG_CONTAINER
        board = fetch_board(client, container)
        print(f"\nBoard for {container}:")
        for column in board.columns:
            print(f"  {column.title} ({len(column.stories)})")
            for story in column.stories:
                print(f"    - {story.title} [{getattr(story.priority, 'value', story.priority)}] tasks={len(story.tasks)}")
    except Exception as e:
        print(f"Error loading board: {e}")

    try:
        backlog = build_backlog(client.fetch_epics(), client.fetch_project_stories())
        print(f"\nUnassigned stories: {len(backlog.unassigned)}")
        for group in backlog.by_epic.values():
            print(f"  {group.epic.name}: {len(group.stories)} stories, {group.progress}% done")
    except Exception as e:
        print(f"Error loading backlog: {e}")

if __name__ == "__main__":
    main()
