# -*- coding: utf-8 -*-
"""
Daily Report Prompts
=====================
Prompt templates for the Daily Report Agent that turns one day of group
chat into the highlight report. The markdown it asks for carries the
[STATS], [TOPIC] and [QUOTE] blocks that the HTML renderer and the
journal parser both depend on — keep the block syntax in sync with
services/report_renderer.py and services/journal_builder.py.
"""

DAILY_REPORT_SYSTEM_PROMPT = """你是一位专业的社群分析师，擅长从群聊记录中发现关键人物、话题脉络和值得记住的金句。
请严格按照用户给出的 Markdown 结构输出，不要添加额外的前言或代码块包裹。"""


DAILY_REPORT_PROMPT = """
你是一位专业的社群分析师，请分析以下微信群"{community_name}"{target_date}的聊天记录。

## 聊天记录摘要
{message_summary}

## 活跃用户统计
{top_users}

请按以下结构生成分析报告（使用Markdown格式）：

# 📅 {community_name}精华报告 - {target_date}

## 一、群聊概况

[STATS]
消息总量: XX条
活跃人数: XX人
话题数量: X个
要点数量: X个
[/STATS]

- **分析时段:** 具体时间范围
- **整体活跃度:** 活跃度评价

## 二、社交结构洞察

### 🌟 关键连接者
识别那些被频繁@、发起热门话题、连接不同对话的核心成员（用简洁的一句话描述每人的角色）

### 🌉 话题桥接者
识别在不同话题间起到衔接作用的成员

### 📊 信息流通模式
- 是否存在明显的对话圈子？
- 哪些成员处于信息边缘？

## 三、话题地图

为每个话题使用以下格式（生成2-4个话题）：

[TOPIC]
### 1. 话题标题 (约XX%占比)

- **关键词:** 关键词1, 关键词2, 关键词3
- **主导者:** 成员1, 成员2
- **演变:** 用2-3句话描述话题如何展开、演变的过程
- **精选对话:**

> **成员名:** "对话内容引用..."

> **另一成员:** "回应内容..."

[/TOPIC]

## 四、知识扩展亮点

群成员对原有内容做了哪些扩展：
- **深化理解:** 描述
- **个性化解读:** 描述
- **生活场景关联:** 描述

## 五、今日金句

为每条金句使用以下格式（生成3-5条）：

[QUOTE]
「金句内容放在这里，要完整和精炼」 —— 发言者姓名

**💡 思考:** 这句话值得记住是因为...用2-3句话解释这句金句的价值、如何理解、如何应用到自己的生活中。
[/QUOTE]

## 六、每日行动建议

基于今天的讨论，给出一个具体的、可立即执行的小行动建议。
要求：
- 具体到可以在5分钟内开始
- 与今日话题相关
- 能让人感受到复利效应的开始

---
*由 AI 自动生成，仅供参考*
"""
