from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Optional

from adinsight_web.domain.models import ChannelPerformance, DashboardData, KPIMetric, TrendPoint

DEMO_DAYS = 7

SAMPLE_DATA = """Date,Platform,Campaign,Spend,Impressions,Clicks,Conversions,Revenue
2024-05-01,Instagram,Spring_Sale_A,150000,25000,450,15,650000
2024-05-01,Google,Brand_Search,120000,4000,280,32,1200000
2024-05-02,Instagram,Spring_Sale_A,160000,27000,480,18,720000
2024-05-02,Google,Brand_Search,110000,3800,260,30,1100000
2024-05-03,Instagram,Reels_Video_B,200000,45000,600,25,850000
2024-05-03,YouTube,Awareness_Video,300000,80000,300,5,100000
2024-05-04,Instagram,Spring_Sale_A,140000,24000,420,14,600000
2024-05-04,Google,Brand_Search,130000,4200,310,35,1350000
2024-05-05,Facebook,Retargeting_D,80000,12000,150,12,480000
2024-05-05,Instagram,Spring_Sale_A,155000,26000,460,16,680000
2024-05-06,Google,Competitor_Kw,90000,3500,180,8,250000
2024-05-06,Instagram,Reels_Video_B,210000,46000,620,28,920000"""


def build_demo_dashboard(today: Optional[date] = None, rng: Optional[random.Random] = None) -> DashboardData:
    """Synthetic dashboard for the offline demo: the last seven days up to today."""
    today = today or date.today()
    rng = rng or random.Random()
    rand = rng.randint

    dates = [today - timedelta(days=DEMO_DAYS - 1 - i) for i in range(DEMO_DAYS)]

    daily_trend = []
    for d in dates:
        cost = rand(300000, 600000)
        daily_trend.append(
            TrendPoint(
                date=d.isoformat(),
                cost=cost,
                conversions=cost // rand(15000, 25000),
                clicks=cost // rand(1000, 3000),
                impressions=cost // rand(50, 150),
            )
        )

    kpis = {
        "spend": KPIMetric("총 비용", f"₩{rand(250, 450):,},000", f"+{rand(5, 20)}%", "up"),
        "roas": KPIMetric("ROAS", f"{rand(280, 420)}%", f"+{rand(2, 10)}%", "up"),
        "cpa": KPIMetric("CPA", f"₩{rand(14, 18)},000", f"-{rand(1, 8)}%", "down"),
        "ctr": KPIMetric("CTR", f"{rand(20, 35) / 10:.1f}%", f"+0.{rand(1, 5)}%", "up"),
        "conversions": KPIMetric("총 전환", f"{rand(250, 400)}", f"+{rand(10, 25)}%", "up"),
        "clicks": KPIMetric("클릭 수", f"{rand(3500, 5000):,}", f"+{rand(5, 15)}%", "up"),
    }

    channels = [
        ChannelPerformance("Instagram", rand(1500000, 2000000), rand(350, 450), rand(120, 180)),
        ChannelPerformance("Google Search", rand(1200000, 1800000), rand(300, 380), rand(100, 150)),
        ChannelPerformance("YouTube", rand(800000, 1200000), rand(150, 220), rand(40, 80)),
        ChannelPerformance("Meta (FB)", rand(600000, 900000), rand(320, 480), rand(50, 90)),
    ]

    return DashboardData(
        kpis=kpis,
        daily_trend=daily_trend,
        channel_performance=channels,
        ai_summary=(
            "Instagram 채널의 ROAS가 타 채널 대비 30% 높으며, 주말 기간 CTR 상승이 전체 성과를 견인하고 있습니다. "
            "예산 효율화를 위해 저성과 채널의 비중 조정이 필요합니다."
        ),
        recommendations=[
            "성과가 우수한 Instagram 및 Meta 채널의 일일 예산을 20% 증액하여 매출 규모를 확대하세요.",
            "YouTube 광고 소재를 숏폼(Shorts) 위주로 변경하여 클릭률(CTR)을 1.5% 이상으로 개선해보세요.",
            "Google Search 광고의 '전환당 비용(CPA)'이 안정적이므로, 롱테일 키워드를 추가 발굴하여 확장을 시도하세요.",
        ],
    )
