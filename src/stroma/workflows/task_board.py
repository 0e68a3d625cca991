#!/usr/bin/env python3
"""
Task board workflow: backlog -> in progress -> review -> done, with review
rejection sending work back to in progress.
"""

from __future__ import annotations

from ..cpn import ColoredNet, NetBuilder


def _with_status(task, **changes):
    return {**(task or {}), **changes}


def create_task_board_net() -> ColoredNet:
    builder = NetBuilder("TaskBoard")

    backlog = builder.place('backlog', 'Backlog')
    in_progress = builder.place('in_progress', 'In Progress')
    review = builder.place('review', 'In Review')
    done = builder.place('done', 'Done')

    @builder.transition('start:task', id='start_task', description='Start working on a task')
    async def start_task(binding):
        return _with_status(binding['backlog_token'], status='in_progress')

    @builder.transition('complete:task', id='complete_task',
                        description='Mark task as complete and ready for review')
    async def complete_task(binding):
        return _with_status(binding['in_progress_token'], status='review')

    @builder.transition('review:task:approve', id='review_approve', description='Approve the task in review')
    async def review_approve(binding):
        return _with_status(binding['review_token'], status='done', approved=True)

    @builder.transition('review:task:reject', id='review_reject',
                        description='Reject the task and send back to in progress')
    async def review_reject(binding):
        return _with_status(binding['review_token'], status='in_progress', rejected=True)

    builder.arc(backlog, start_task).arc(in_progress).arc(complete_task).arc(review)
    builder.arc(review, review_approve).arc(done)
    builder.arc(review, review_reject).arc(in_progress)

    return builder.build()
