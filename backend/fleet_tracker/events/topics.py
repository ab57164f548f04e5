"""
이벤트 토픽 이름
"""

TOPIC_ASSIGNED = "orders.assigned"      # 대기 차량에 주문 배정
TOPIC_PICKED_UP = "orders.picked_up"    # 픽업지 도착 → 허브로 복귀 시작
TOPIC_DELIVERED = "orders.delivered"    # 허브 도착 → 다시 대기

TOPICS = [TOPIC_ASSIGNED, TOPIC_PICKED_UP, TOPIC_DELIVERED]
