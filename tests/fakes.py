"""테스트용 인메모리 저장소 / 캐시

서비스 테스트가 데이터베이스 없이 EngagementStore, FeaturedSlotStore,
ScoreCache 인터페이스를 사용할 수 있도록 동일한 의미로 구현합니다.
"""

import json
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional, Sequence

from app.domains.featured.types import FeaturedSlotRecord
from app.domains.ranking.types import (
    CategoryActivity,
    CategoryInfo,
    CreatorInteraction,
    CreatorPolicy,
    CreatorProfile,
    CreatorRankingSnapshot,
    EngagementKind,
    EntitySnapshot,
    QueryContext,
)


@dataclass
class FakeUser:
    id: int
    role: str = "CURATOR"
    is_active: bool = True
    name: Optional[str] = None
    username: Optional[str] = None
    curator_level: Optional[str] = None


@dataclass
class FakeList:
    id: int
    creator_id: int
    category_id: Optional[int] = None
    title: Optional[str] = None
    save_count: int = 0
    like_count: int = 0
    item_count: int = 0
    created_at: Optional[datetime] = None
    tags: tuple[str, ...] = ()
    item_titles: tuple[str, ...] = ()
    is_public: bool = True
    is_active: bool = True


@dataclass
class FakeEvent:
    user_id: int
    list_id: int
    created_at: datetime
    approved: bool = True


class InMemoryEngagementStore:
    """EngagementStore 인메모리 구현 (calls로 메서드 호출 횟수 기록)"""

    def __init__(self, policy: Optional[CreatorPolicy] = None):
        self.policy = policy or CreatorPolicy()
        self.categories: dict[int, CategoryInfo] = {}
        self.users: dict[int, FakeUser] = {}
        self.lists: dict[int, FakeList] = {}
        self.events: dict[EngagementKind, list[FakeEvent]] = {
            kind: [] for kind in EngagementKind
        }
        self.follows: set[tuple[int, int]] = set()
        self.rankings: dict[int, CreatorRankingSnapshot] = {}
        self.calls: Counter = Counter()
        self._next_user_id = 100_000

    # ------------------------------------------------------------------
    # 데이터 구성
    # ------------------------------------------------------------------

    def add_category(
        self, category_id: int, slug: str, name: Optional[str] = None
    ) -> CategoryInfo:
        category = CategoryInfo(id=category_id, slug=slug, name=name or slug.title())
        self.categories[category_id] = category
        return category

    def add_user(self, user_id: int, role: str = "CURATOR", **kwargs) -> FakeUser:
        user = FakeUser(id=user_id, role=role, **kwargs)
        self.users[user_id] = user
        return user

    def add_list(self, list_id: int, creator_id: int, **kwargs) -> FakeList:
        if creator_id not in self.users:
            self.add_user(creator_id)
        lst = FakeList(id=list_id, creator_id=creator_id, **kwargs)
        self.lists[list_id] = lst
        return lst

    def add_event(
        self,
        kind: EngagementKind,
        list_id: int,
        at: datetime,
        user_id: Optional[int] = None,
        approved: bool = True,
    ) -> None:
        if user_id is None:
            self._next_user_id += 1
            user_id = self._next_user_id
        self.events[kind].append(FakeEvent(user_id, list_id, at, approved))

    def add_events(
        self, kind: EngagementKind, list_id: int, at: datetime, count: int
    ) -> None:
        """서로 다른 익명 사용자 count명의 이벤트"""
        for _ in range(count):
            self.add_event(kind, list_id, at)

    def follow(self, follower_id: int, following_id: int) -> None:
        self.follows.add((follower_id, following_id))

    def set_ranking(
        self, user_id: int, influence: float = 0.0, momentum: float = 0.0
    ) -> None:
        self.rankings[user_id] = CreatorRankingSnapshot(
            user_id=user_id, influence_score=influence, momentum_score=momentum
        )

    # ------------------------------------------------------------------
    # 내부 도우미
    # ------------------------------------------------------------------

    def _snapshot(self, lst: FakeList) -> EntitySnapshot:
        category = self.categories.get(lst.category_id)
        return EntitySnapshot(
            id=lst.id,
            title=lst.title or f"List {lst.id}",
            slug=f"list-{lst.id}",
            creator_id=lst.creator_id,
            category_id=lst.category_id,
            category_slug=category.slug if category else None,
            category_name=category.name if category else None,
            save_count=lst.save_count,
            like_count=lst.like_count,
            item_count=lst.item_count,
            created_at=lst.created_at,
            tags=tuple(lst.tags),
            item_titles=tuple(lst.item_titles),
        )

    def _eligible(self, lst: FakeList) -> bool:
        user = self.users.get(lst.creator_id)
        return (
            lst.is_public
            and lst.is_active
            and self.policy.allows(user.role if user else None)
        )

    def _by_saves(self, lists) -> list[FakeList]:
        return sorted(lists, key=lambda lst: (-lst.save_count, lst.id))

    def _window(
        self, ctx: QueryContext, kind: EngagementKind, ids, since: datetime
    ) -> list[FakeEvent]:
        wanted = set(ids)
        return [
            e
            for e in self.events[kind]
            if e.list_id in wanted
            and since <= e.created_at <= ctx.now
            and (kind != EngagementKind.COMMENT or e.approved)
        ]

    # ------------------------------------------------------------------
    # EngagementStore
    # ------------------------------------------------------------------

    async def get_engagement_counts(self, ctx, entity_ids, kind, since):
        self.calls["get_engagement_counts"] += 1
        return dict(Counter(e.list_id for e in self._window(ctx, kind, entity_ids, since)))

    async def get_last_activity_timestamps(self, ctx, entity_ids, kind, since):
        self.calls["get_last_activity_timestamps"] += 1
        last: dict[int, datetime] = {}
        for e in self._window(ctx, kind, entity_ids, since):
            if e.list_id not in last or e.created_at > last[e.list_id]:
                last[e.list_id] = e.created_at
        return last

    async def get_entity_snapshots(self, ctx, entity_ids):
        self.calls["get_entity_snapshots"] += 1
        return {
            i: self._snapshot(self.lists[i]) for i in entity_ids if i in self.lists
        }

    async def list_active_categories(self, ctx):
        self.calls["list_active_categories"] += 1
        return [self.categories[k] for k in sorted(self.categories)]

    async def get_category_candidates(self, ctx, category_ids, per_category):
        self.calls["get_category_candidates"] += 1
        result = []
        for category_id in sorted(category_ids):
            in_category = [
                lst
                for lst in self.lists.values()
                if lst.category_id == category_id and self._eligible(lst)
            ]
            result.extend(
                self._snapshot(lst)
                for lst in self._by_saves(in_category)[:per_category]
            )
        return result

    async def get_lists_saved_since(self, ctx, since, limit):
        self.calls["get_lists_saved_since"] += 1
        saved = {
            e.list_id
            for e in self.events[EngagementKind.SAVE]
            if since <= e.created_at <= ctx.now
        }
        lists = [
            lst for lst in self.lists.values() if lst.id in saved and self._eligible(lst)
        ]
        return [self._snapshot(lst) for lst in self._by_saves(lists)[:limit]]

    async def get_top_saved_lists(
        self, ctx, limit, category_id=None, exclude_ids=()
    ):
        self.calls["get_top_saved_lists"] += 1
        excluded = set(exclude_ids)
        lists = [
            lst
            for lst in self.lists.values()
            if self._eligible(lst)
            and lst.id not in excluded
            and (category_id is None or lst.category_id == category_id)
        ]
        return [self._snapshot(lst) for lst in self._by_saves(lists)[:limit]]

    async def get_similarity_source(self, ctx, list_id):
        self.calls["get_similarity_source"] += 1
        lst = self.lists.get(list_id)
        return self._snapshot(lst) if lst else None

    def _savers(self, list_id: int) -> set[int]:
        return {
            e.user_id
            for e in self.events[EngagementKind.SAVE]
            if e.list_id == list_id
        }

    async def count_distinct_savers(self, ctx, list_id):
        self.calls["count_distinct_savers"] += 1
        return len(self._savers(list_id))

    async def get_co_saved_lists(self, ctx, list_id, limit):
        self.calls["get_co_saved_lists"] += 1
        savers = self._savers(list_id)
        overlap: dict[int, set[int]] = defaultdict(set)
        for e in self.events[EngagementKind.SAVE]:
            if e.user_id in savers and e.list_id != list_id:
                overlap[e.list_id].add(e.user_id)
        ranked = sorted(overlap.items(), key=lambda kv: (-len(kv[1]), kv[0]))
        return [(i, len(users)) for i, users in ranked[:limit]]

    async def get_lists_by_ids(self, ctx, list_ids):
        self.calls["get_lists_by_ids"] += 1
        return [
            self._snapshot(self.lists[i])
            for i in sorted(set(list_ids))
            if i in self.lists and self._eligible(self.lists[i])
        ]

    async def get_similarity_candidates(self, ctx, source, limit, exclude_ids=()):
        self.calls["get_similarity_candidates"] += 1
        excluded = {source.id, *exclude_ids}
        tags = set(source.tags)

        def matches(lst: FakeList) -> bool:
            same_category = (
                source.category_id is not None
                and lst.category_id == source.category_id
            )
            return same_category or bool(tags & set(lst.tags))

        lists = [
            lst
            for lst in self.lists.values()
            if lst.id not in excluded and self._eligible(lst) and matches(lst)
        ]
        return [self._snapshot(lst) for lst in self._by_saves(lists)[:limit]]

    def _category_slug(self, list_id: int) -> Optional[str]:
        lst = self.lists.get(list_id)
        category = self.categories.get(lst.category_id) if lst else None
        return category.slug if category else None

    async def get_user_category_activity(self, ctx, user_id):
        self.calls["get_user_category_activity"] += 1
        counts: dict[str, Counter] = defaultdict(Counter)
        for name, kind in (("saves", EngagementKind.SAVE), ("likes", EngagementKind.LIKE)):
            for e in self.events[kind]:
                slug = self._category_slug(e.list_id)
                if e.user_id == user_id and slug:
                    counts[slug][name] += 1
        for lst in self.lists.values():
            slug = self._category_slug(lst.id)
            if lst.creator_id == user_id and lst.is_public and slug:
                counts[slug]["lists"] += 1
        return {
            slug: CategoryActivity(
                saves=c["saves"], lists=c["lists"], likes=c["likes"]
            )
            for slug, c in counts.items()
        }

    def _public_lists(self, creator_id: int) -> list[FakeList]:
        return [
            lst
            for lst in self.lists.values()
            if lst.creator_id == creator_id and lst.is_public and lst.is_active
        ]

    async def get_creator_ids(self, ctx):
        self.calls["get_creator_ids"] += 1
        return sorted(
            {
                lst.creator_id
                for lst in self.lists.values()
                if lst.is_public
                and lst.is_active
                and self.users[lst.creator_id].is_active
            }
        )

    async def get_followed_creator_ids(self, ctx, user_id):
        self.calls["get_followed_creator_ids"] += 1
        return {following for follower, following in self.follows if follower == user_id}

    async def get_creator_category_counts(self, ctx, creator_ids):
        self.calls["get_creator_category_counts"] += 1
        result = {}
        for creator_id in creator_ids:
            counts = Counter(
                self._category_slug(lst.id) or "other"
                for lst in self._public_lists(creator_id)
            )
            if counts:
                result[creator_id] = dict(counts)
        return result

    async def get_user_creator_interactions(self, ctx, user_id):
        self.calls["get_user_creator_interactions"] += 1
        counts: dict[int, Counter] = defaultdict(Counter)
        for name, kind in (("saves", EngagementKind.SAVE), ("likes", EngagementKind.LIKE)):
            for e in self.events[kind]:
                if e.user_id == user_id and e.list_id in self.lists:
                    counts[self.lists[e.list_id].creator_id][name] += 1
        return {
            creator_id: CreatorInteraction(saves=c["saves"], likes=c["likes"])
            for creator_id, c in counts.items()
        }

    async def get_creator_ranking_snapshots(self, ctx, user_ids):
        self.calls["get_creator_ranking_snapshots"] += 1
        return {i: self.rankings[i] for i in user_ids if i in self.rankings}

    async def get_creator_profiles(self, ctx, creator_ids):
        self.calls["get_creator_profiles"] += 1
        profiles = {}
        for creator_id in creator_ids:
            user = self.users.get(creator_id)
            if user is None or not user.is_active:
                continue
            lists = self._public_lists(creator_id)
            category_counts = Counter(
                lst.category_id for lst in lists if lst.category_id in self.categories
            )
            top = sorted(
                category_counts.items(),
                key=lambda kv: (-kv[1], self.categories[kv[0]].slug),
            )[:3]
            profiles[creator_id] = CreatorProfile(
                user_id=creator_id,
                name=user.name,
                username=user.username,
                curator_level=user.curator_level or "EXPLORER",
                list_count=len(lists),
                total_likes=sum(lst.like_count for lst in lists),
                viral_count=sum(1 for lst in lists if lst.like_count >= 50),
                top_categories=tuple(self.categories[cid] for cid, _ in top),
            )
        return profiles


class InMemoryFeaturedSlotStore:
    """FeaturedSlotStore 인메모리 구현"""

    def __init__(self):
        self.slots: dict[int, FeaturedSlotRecord] = {}

    def add_slot(self, slot_id: int, list_id: int, start_at: datetime, **kwargs):
        self.slots[slot_id] = FeaturedSlotRecord(
            id=slot_id, list_id=list_id, start_at=start_at, **kwargs
        )
        return self.slots[slot_id]

    async def get_slot(self, ctx, slot_id):
        return self.slots.get(slot_id)

    async def get_slots_started_between(self, ctx, start, end=None):
        return sorted(
            (
                s
                for s in self.slots.values()
                if s.start_at >= start and (end is None or s.start_at < end)
            ),
            key=lambda s: (s.start_at, s.id),
        )

    async def get_active_slots(self, ctx):
        return [s for s in self.slots.values() if s.is_active_at(ctx.now)]

    async def get_recent_slots(self, ctx, limit):
        started = [s for s in self.slots.values() if s.start_at <= ctx.now]
        started.sort(key=lambda s: (s.start_at, s.id), reverse=True)
        return started[:limit]

    async def get_last_featured_at(self, ctx):
        last: dict[int, datetime] = {}
        for s in self.slots.values():
            at = s.end_at or s.start_at
            if s.list_id not in last or at > last[s.list_id]:
                last[s.list_id] = at
        return last

    async def get_scheduled_list_ids(self, ctx):
        return {
            s.list_id
            for s in self.slots.values()
            if s.is_active_at(ctx.now) or s.start_at > ctx.now
        }

    async def upsert_featured_slot_score_snapshot(
        self,
        ctx,
        slot_id,
        baseline_score=None,
        peak_score=None,
        baseline_saves=None,
    ):
        slot = self.slots.get(slot_id)
        if slot is None or (slot.end_at is not None and slot.end_at <= ctx.now):
            return False

        changes: dict[str, Any] = {}
        if baseline_saves is not None and slot.baseline_saves is None:
            changes["baseline_saves"] = baseline_saves
        if baseline_score is not None and slot.baseline_score is None:
            changes["baseline_score"] = baseline_score
        if peak_score is not None:
            changes["peak_score"] = max(
                slot.peak_score if slot.peak_score is not None else peak_score,
                peak_score,
            )
        self.slots[slot_id] = replace(slot, **changes)
        return True


@dataclass
class InMemoryScoreCache:
    """ScoreCache 인메모리 구현 (JSON 직렬화까지 동일하게 수행)"""

    data: dict[str, str] = field(default_factory=dict)
    ttls: dict[str, int] = field(default_factory=dict)
    reads: int = 0
    writes: int = 0

    async def get_json(self, key: str) -> Optional[Any]:
        self.reads += 1
        raw = self.data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.writes += 1
        self.data[key] = json.dumps(value, default=str)
        self.ttls[key] = ttl_seconds

    async def close(self) -> None:
        self.data.clear()


def snapshot_ids(items: Sequence[Any], attr: str = "list_id") -> list[int]:
    return [getattr(item, attr) for item in items]
